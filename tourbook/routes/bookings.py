from flask import Blueprint, jsonify, request

from tourbook.auth import require_auth, require_roles
from tourbook.services.booking_service import BookingService

bookings_bp = Blueprint('bookings', __name__)


@bookings_bp.route('', methods=['GET'])
@require_roles('customer')
def list_bookings(ctx):
    """
    The caller's bookings, newest first
    GET /api/bookings
    """
    return jsonify({"bookings": BookingService.get_user_bookings(ctx.user_id)}), 200


@bookings_bp.route('', methods=['POST'])
@require_roles('customer')
def create_booking(ctx):
    """
    Create a booking
    POST /api/bookings
    Body: {
        "tourId": 1,
        "vehicleId": 2,
        "driverId": 3,
        "startDate": "2025-06-01",
        "endDate": "2025-06-05",
        "totalPrice": 1200,
        "peopleCount": 2,
        "specialRequests": "...",
        "firstName": "...", "lastName": "...", "phone": "..."
    }
    """
    data = request.get_json(silent=True) or {}
    return jsonify(BookingService.create_booking(ctx, data)), 201


@bookings_bp.route('/assigned', methods=['GET'])
@require_roles('tourguide', 'driver')
def assigned_bookings(ctx):
    """
    Trips the calling guide or driver is on
    GET /api/bookings/assigned?status=confirmed
    """
    bookings = BookingService.get_assigned_bookings(ctx, request.args.get('status'))
    return jsonify({"bookings": bookings}), 200


@bookings_bp.route('/check-assignment', methods=['GET'])
@require_roles('tourguide', 'driver')
def check_assignment(ctx):
    """GET /api/bookings/check-assignment?booking_id=1"""
    booking_id = request.args.get('booking_id', type=int)
    if not booking_id:
        return jsonify({'error': 'booking_id is required'}), 400
    return jsonify(BookingService.check_assignment(ctx, booking_id)), 200


@bookings_bp.route('/<int:booking_id>', methods=['GET'])
@require_auth
def get_booking(booking_id, ctx):
    return jsonify(BookingService.get_booking_detail(ctx, booking_id)), 200
