"""
Helper utilities
"""
import base64
import binascii
from datetime import date, datetime
from decimal import Decimal


def split_name(name):
    """
    Split a full name into (first, last)

    The first word is the first name; everything after it is the last name.

    Args:
        name (str): Full name, may be empty

    Returns:
        tuple: (first_name, last_name), empty strings when missing
    """
    parts = (name or '').split()
    if not parts:
        return '', ''
    return parts[0], ' '.join(parts[1:])


def normalize_image_path(path, default=None):
    """
    Normalize a stored image reference for the frontend

    Absolute URLs and root-relative paths are returned as-is, bare file
    names are placed under /images/.
    """
    if not path:
        return default
    if path.startswith(('http://', 'https://', '/')):
        return path
    return f'/images/{path}'


def to_float(value):
    """Convert Decimal/str numerics to float, keeping None"""
    if value is None:
        return None
    if isinstance(value, (Decimal, int, float, str)):
        return float(value)
    return value


def isoformat(value):
    """Format date or datetime as ISO string"""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def decoded_size(picture):
    """
    Size in bytes of a picture payload

    Accepts a data URL or bare base64. Anything that is not valid base64
    is measured as raw UTF-8.
    """
    if not picture:
        return 0
    payload = picture.split(',', 1)[1] if picture.startswith('data:') else picture
    try:
        return len(base64.b64decode(payload, validate=True))
    except (binascii.Error, ValueError):
        return len(picture.encode('utf-8'))
