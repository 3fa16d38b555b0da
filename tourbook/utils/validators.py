"""
Validation utilities
"""
import re
from datetime import date, datetime

from tourbook.errors import ValidationError

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
SPECIAL_CHARACTERS = re.compile(r'[!@#$%^&*(),.?":{}|<>]')


def validate_email(email):
    """
    Validate email format

    Args:
        email (str): Email address to validate

    Returns:
        bool: True if valid, False otherwise
    """
    if not email or not isinstance(email, str):
        return False
    return bool(EMAIL_PATTERN.match(email))


def is_strong_password(password):
    """
    Check password strength

    At least 8 characters with an uppercase letter, a lowercase letter,
    a digit and one of !@#$%^&*(),.?":{}|<>

    Args:
        password (str): Candidate password

    Returns:
        bool: True if strong enough
    """
    if not password or not isinstance(password, str) or len(password) < 8:
        return False
    return bool(
        re.search(r'[A-Z]', password)
        and re.search(r'[a-z]', password)
        and re.search(r'\d', password)
        and SPECIAL_CHARACTERS.search(password)
    )


def validate_rating(value, field='rating'):
    """
    Coerce a rating to an int between 1 and 5

    Raises:
        ValidationError: if the value is not an integer in range
    """
    try:
        rating = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be an integer')
    if isinstance(value, float) and value != rating:
        raise ValidationError(f'{field} must be an integer')
    if rating < 1 or rating > 5:
        raise ValidationError(f'{field} must be between 1 and 5')
    return rating


def validate_coordinates(latitude, longitude):
    """
    Validate GPS coordinates

    Returns:
        tuple: (latitude, longitude) as floats
    """
    try:
        lat = float(latitude)
        lng = float(longitude)
    except (TypeError, ValueError):
        raise ValidationError('Latitude and longitude are required numbers')
    if lat < -90 or lat > 90 or lng < -180 or lng > 180:
        raise ValidationError('Invalid coordinates')
    return lat, lng


def parse_date(value, field='date'):
    """
    Parse an ISO date (YYYY-MM-DD or a full ISO timestamp)

    Raises:
        ValidationError: if the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str):
        raise ValidationError(f'{field} is required')
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        raise ValidationError(f'Invalid {field}. Use YYYY-MM-DD')


def require_fields(data, fields):
    """
    Raise ValidationError naming the first missing (None or empty) field
    """
    missing = [name for name in fields if data.get(name) in (None, '')]
    if missing:
        raise ValidationError(
            'Missing required fields: ' + ', '.join(missing),
            details={'missing': missing},
        )


def require_string(data, field):
    """Return ``data[field]`` stripped, rejecting non-string JSON values"""
    value = data.get(field)
    if not isinstance(value, str):
        raise ValidationError(f'{field} must be a string')
    return value.strip()


def coerce_id(value, field):
    """Integer id from a JSON value (int or numeric string); None when absent"""
    if value in (None, ''):
        return None
    if isinstance(value, bool):
        raise ValidationError(f'{field} must be a number')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be a number')
