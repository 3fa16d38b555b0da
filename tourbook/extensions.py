"""
Shared Flask extension instances.

Created as a separate module to avoid circular imports when models and
route blueprints need access to extensions that are initialised in
create_app().
"""

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

# Storage comes from RATELIMIT_STORAGE_URI (Redis in production, memory otherwise).
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["100 per minute"],
)
