"""
Auth cookie handling and route decorators.

The login route stores a signed JWT carrying {user_id, role} in the
httpOnly ``auth_token`` cookie. API clients may send the same token in an
``Authorization: Bearer`` header instead.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import wraps

import jwt
from flask import current_app, jsonify, request

from tourbook.extensions import db
from tourbook.models import User
from tourbook.services.accounts import Employee


@dataclass(frozen=True)
class AuthContext:
    """Authenticated caller, passed explicitly into services"""
    user_id: int
    role: str

    @property
    def is_admin(self):
        return self.role == 'admin'


def issue_token(user_id: int, role: str) -> str:
    """Generate a JWT for the auth cookie"""
    now = datetime.now(timezone.utc)
    payload = {
        'user_id': user_id,
        'role': role,
        'iat': now,
        'exp': now + current_app.config['JWT_EXPIRES'],
    }
    return jwt.encode(
        payload,
        current_app.config['JWT_SECRET'],
        algorithm=current_app.config['JWT_ALGORITHM'],
    )


def decode_token(token: str) -> dict:
    """Decode and verify a JWT, raising ValueError when it is unusable"""
    try:
        return jwt.decode(
            token,
            current_app.config['JWT_SECRET'],
            algorithms=[current_app.config['JWT_ALGORITHM']],
        )
    except jwt.ExpiredSignatureError:
        raise ValueError('Token has expired')
    except jwt.InvalidTokenError:
        raise ValueError('Invalid token')


def set_auth_cookie(response, token):
    response.set_cookie(
        current_app.config['AUTH_COOKIE_NAME'],
        token,
        max_age=int(current_app.config['JWT_EXPIRES'].total_seconds()),
        httponly=True,
        secure=current_app.config['AUTH_COOKIE_SECURE'],
        samesite='Lax',
    )
    return response


def clear_auth_cookie(response):
    response.delete_cookie(current_app.config['AUTH_COOKIE_NAME'])
    return response


def _token_from_request():
    auth_header = request.headers.get('Authorization', '')
    if auth_header.startswith('Bearer '):
        return auth_header[len('Bearer '):]
    return request.cookies.get(current_app.config['AUTH_COOKIE_NAME'])


def current_context():
    """Return the AuthContext for this request, or None when not logged in"""
    token = _token_from_request()
    if not token:
        return None
    try:
        payload = decode_token(token)
    except ValueError:
        return None
    user = db.session.get(User, payload.get('user_id'))
    if not user:
        return None
    # The stored role wins over the token claim
    return AuthContext(user_id=user.user_id, role=user.role)


def require_auth(f):
    """Decorator to require authentication; injects ``ctx``"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        ctx = current_context()
        if ctx is None:
            return jsonify({'error': 'Unauthorized'}), 401
        return f(*args, ctx=ctx, **kwargs)
    return decorated_function


def require_roles(*roles):
    """Decorator to require one of ``roles``; implies require_auth"""
    def decorator(f):
        @wraps(f)
        @require_auth
        def decorated_function(*args, ctx, **kwargs):
            if ctx.role not in roles:
                return jsonify({'error': 'Insufficient permissions'}), 403
            return f(*args, ctx=ctx, **kwargs)
        return decorated_function
    return decorator


def require_hr(f):
    """Admins, or employees who belong to HR"""
    @wraps(f)
    @require_auth
    def decorated_function(*args, ctx, **kwargs):
        if ctx.role == 'admin':
            return f(*args, ctx=ctx, **kwargs)
        if ctx.role != 'employee' or not Employee.is_hr(ctx.user_id):
            return jsonify({'error': 'HR access required'}), 403
        return f(*args, ctx=ctx, **kwargs)
    return decorated_function
