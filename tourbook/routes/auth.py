"""
Signup, login and session routes
"""
import logging

from flask import Blueprint, jsonify, request

from tourbook.auth import clear_auth_cookie, issue_token, require_auth, set_auth_cookie
from tourbook.extensions import db, limiter
from tourbook.models import User
from tourbook.services.accounts import Admin, Customer, Driver, Employee, Guest, TourGuide
from tourbook.services.auth_service import DB_ERROR, AuthService

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)

ROLE_FACADES = {
    'customer': Customer,
    'admin': Admin,
    'employee': Employee,
    'tourguide': TourGuide,
    'driver': Driver,
}


@auth_bp.route('/signup', methods=['POST'])
@limiter.limit("10 per minute")
def signup():
    """
    Register a customer
    POST /api/auth/signup
    Body: {username, email, password, first_name, last_name, phoneNo?, address?, DOB?}
    """
    data = request.get_json(silent=True) or {}
    created = Guest.guest_signup(data)
    return jsonify({
        "message": "Registration successful",
        **created,
    }), 201


@auth_bp.route('/login', methods=['POST'])
@limiter.limit("10 per minute")
def login():
    """
    Log in by username or email and set the auth cookie
    POST /api/auth/login
    Body: {identifier | email | username, password, role?}
    """
    data = request.get_json(silent=True) or {}
    identifier = data.get('identifier') or data.get('email') or data.get('username')
    password = data.get('password')
    if not identifier or not password:
        return jsonify({'error': 'Identifier and password are required'}), 400

    role = data.get('role')
    if role:
        facade = ROLE_FACADES.get(role)
        if facade is None:
            return jsonify({'error': 'Invalid role'}), 400
        result = facade.login(identifier, password)
        if result is None:
            logger.info("Login refused for role %s", role)
            return jsonify({'error': 'Invalid credentials'}), 401
    else:
        outcome = AuthService.login_detailed(identifier, password)
        if not outcome.ok:
            logger.info("Login failed: %s", outcome.reason)
            if outcome.reason == DB_ERROR:
                return jsonify({'error': 'Server error'}), 500
            return jsonify({'error': 'Invalid credentials'}), 401
        result = outcome.result

    response = jsonify({"user": result.to_dict()})
    return set_auth_cookie(response, issue_token(result.user_id, result.role)), 200


@auth_bp.route('/logout', methods=['POST'])
def logout():
    return clear_auth_cookie(jsonify({"ok": True})), 200


@auth_bp.route('/me', methods=['GET'])
@require_auth
def me(ctx):
    user = db.session.get(User, ctx.user_id)
    return jsonify({"authenticated": True, "user": user.to_dict()}), 200


@auth_bp.route('/change-password', methods=['POST'])
@limiter.limit("10 per minute")
@require_auth
def change_password(ctx):
    """
    POST /api/auth/change-password
    Body: {currentPassword, newPassword, confirmPassword}
    """
    data = request.get_json(silent=True) or {}
    AuthService.change_password(
        ctx.user_id,
        data.get('currentPassword'),
        data.get('newPassword'),
        data.get('confirmPassword'),
    )
    return jsonify({"message": "Password changed successfully"}), 200
