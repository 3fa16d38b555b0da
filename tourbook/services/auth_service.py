"""
Credential checks and password hashing.
"""
import logging
import re
from dataclasses import dataclass
from typing import Optional

import bcrypt
from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from tourbook.database import get_for_update, transaction
from tourbook.errors import ConflictError, NotFoundError, ValidationError
from tourbook.extensions import db
from tourbook.models import User
from tourbook.utils import is_strong_password

logger = logging.getLogger(__name__)

STRONG_HASH = re.compile(r'^\$2[aby]\$')

NOT_FOUND = 'NOT_FOUND'
INVALID_PASSWORD = 'INVALID_PASSWORD'
DB_ERROR = 'DB_ERROR'


@dataclass
class LoginResult:
    user_id: int
    username: str
    role: str

    def to_dict(self):
        return {"user_id": self.user_id, "username": self.username, "role": self.role}


@dataclass
class LoginOutcome:
    ok: bool
    result: Optional[LoginResult] = None
    reason: Optional[str] = None
    rehashed: bool = False


def hash_password(password: str) -> str:
    """Hash a password using bcrypt"""
    rounds = current_app.config.get('BCRYPT_LOG_ROUNDS', 12)
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds)).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its bcrypt hash"""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def is_strong_hash(stored: str) -> bool:
    return bool(stored) and bool(STRONG_HASH.match(stored))


def password_matches(password: str, stored: str) -> bool:
    """bcrypt check, or plain comparison for legacy unhashed passwords"""
    if is_strong_hash(stored):
        return verify_password(password, stored)
    return bool(stored) and stored == password


class AuthService:
    """Login and identity uniqueness checks"""

    @staticmethod
    def find_by_identifier(identifier):
        """
        Look up a user by email or username.

        When the identifier is one user's email and another user's
        username, the email match wins.
        """
        matches = (
            User.query
            .filter(or_(User.email == identifier, User.username == identifier))
            .order_by(User.user_id)
            .all()
        )
        for user in matches:
            if user.email == identifier:
                return user
        return matches[0] if matches else None

    @staticmethod
    def login_detailed(identifier, password) -> LoginOutcome:
        """
        Check credentials and report why a login failed.

        Accounts still holding a plaintext password are upgraded to bcrypt
        on their first successful login. A failed upgrade is logged and the
        login still succeeds.
        """
        identifier = identifier.strip() if isinstance(identifier, str) else ''
        if not identifier or not password or not isinstance(password, str):
            return LoginOutcome(ok=False, reason=NOT_FOUND)

        try:
            user = AuthService.find_by_identifier(identifier)
        except SQLAlchemyError:
            logger.exception("Login lookup failed")
            db.session.rollback()
            return LoginOutcome(ok=False, reason=DB_ERROR)

        if user is None:
            return LoginOutcome(ok=False, reason=NOT_FOUND)

        stored = user.password_hash or ''
        rehashed = False
        if not password_matches(password, stored):
            return LoginOutcome(ok=False, reason=INVALID_PASSWORD)
        if not is_strong_hash(stored):
            try:
                user.password_hash = hash_password(password)
                db.session.commit()
                rehashed = True
                logger.info("Upgraded legacy plaintext password for user %s", user.user_id)
            except SQLAlchemyError:
                db.session.rollback()
                logger.warning("Could not upgrade legacy password for user %s", user.user_id, exc_info=True)

        return LoginOutcome(
            ok=True,
            result=LoginResult(user_id=user.user_id, username=user.username, role=user.role),
            rehashed=rehashed,
        )

    @staticmethod
    def login(identifier, password) -> Optional[LoginResult]:
        outcome = AuthService.login_detailed(identifier, password)
        return outcome.result if outcome.ok else None

    @staticmethod
    def ensure_unique_username_email(username, email):
        """Raise ConflictError (code DUPLICATE) if either is already taken"""
        existing = User.query.filter(
            or_(User.username == username, User.email == email)
        ).first()
        if existing:
            raise ConflictError('Username or email already exists', code='DUPLICATE')

    @staticmethod
    def change_password(user_id, current_password, new_password, confirm_password):
        """
        Replace the caller's password after checking the current one.

        Raises:
            ValidationError: missing fields, mismatched confirmation, weak or
                unchanged password, wrong current password
            NotFoundError: the account no longer exists
        """
        values = (current_password, new_password, confirm_password)
        if not all(isinstance(v, str) and v for v in values):
            raise ValidationError('currentPassword, newPassword and confirmPassword are required')
        if new_password != confirm_password:
            raise ValidationError('New passwords do not match')
        if not is_strong_password(new_password):
            raise ValidationError(
                'New password must be at least 8 characters and include upper and lower case '
                'letters, a number and a special character'
            )

        with transaction():
            user = get_for_update(User, user_id)
            if user is None:
                raise NotFoundError('User not found')
            stored = user.password_hash or ''
            if not password_matches(current_password, stored):
                raise ValidationError('Current password is incorrect', code='INVALID_PASSWORD')
            if password_matches(new_password, stored):
                raise ValidationError('New password must be different from current password')
            user.password_hash = hash_password(new_password)
        logger.info("User %s changed their password", user_id)
