"""
Admin staff management routes
"""
from flask import Blueprint, jsonify, request

from tourbook.auth import require_roles
from tourbook.services.accounts import Admin

admin_bp = Blueprint('admin', __name__)


@admin_bp.route('/register-employee', methods=['POST'])
@require_roles('admin')
def register_employee(ctx):
    """
    Create an admin, employee, tour guide or driver account
    POST /api/admin/register-employee
    Body: {
        "role": "driver",
        "name": "Jane Doe",
        "email": "jane@example.com",
        "username": "jane" (optional, generated),
        "password": "..." (optional, generated and returned once),
        "phoneNo": "...", "address": "...",
        "adminLevel": 1,                      (admin)
        "position": "...", "department": "...", (employee)
        "licenseNo": "...",                   (tourguide, driver)
        "experience": 3, "specialization": "...", (tourguide)
        "vehicleType": "...", "picture": "data:image/png;base64,..." (driver)
    }
    """
    data = request.get_json(silent=True) or {}
    return jsonify(Admin.register_employee(ctx, data)), 201


@admin_bp.route('/employees', methods=['GET'])
@require_roles('admin')
def list_employees(ctx):
    """GET /api/admin/employees?role=driver"""
    return jsonify({"employees": Admin.list_staff(ctx, request.args.get('role'))}), 200


@admin_bp.route('/employees/<int:user_id>', methods=['DELETE'])
@require_roles('admin')
def remove_employee(user_id, ctx):
    Admin.remove_staff(ctx, user_id)
    return jsonify({"ok": True}), 200


@admin_bp.route('/assign-driver', methods=['POST'])
@require_roles('admin')
def assign_driver(ctx):
    """
    Put a driver on a booking that has none
    POST /api/admin/assign-driver
    Body: {bookingId, driverId}
    """
    data = request.get_json(silent=True) or {}
    booking = Admin.assign_driver(ctx, data.get('bookingId'), data.get('driverId'))
    return jsonify({"booking": booking.to_dict()}), 200


@admin_bp.route('/reset-employee-password', methods=['POST'])
@require_roles('admin')
def reset_employee_password(ctx):
    """
    POST /api/admin/reset-employee-password
    Body: {userId | username, newPassword?}
    """
    data = request.get_json(silent=True) or {}
    return jsonify({"message": "Password reset successfully", **Admin.reset_staff_password(ctx, data)}), 200
