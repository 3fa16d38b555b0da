"""
Utility functions package
"""
from .validators import (
    validate_email,
    is_strong_password,
    validate_rating,
    validate_coordinates,
    parse_date,
    require_fields,
    require_string,
    coerce_id,
)
from .helpers import (
    split_name,
    normalize_image_path,
    to_float,
    isoformat,
    decoded_size,
)

__all__ = [
    'validate_email',
    'is_strong_password',
    'validate_rating',
    'validate_coordinates',
    'parse_date',
    'require_fields',
    'require_string',
    'coerce_id',
    'split_name',
    'normalize_image_path',
    'to_float',
    'isoformat',
    'decoded_size',
]
