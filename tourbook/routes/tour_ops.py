from flask import Blueprint, jsonify, request

from tourbook.auth import require_roles
from tourbook.services.booking_service import BookingService

tour_ops_bp = Blueprint('tour_ops', __name__)


@tour_ops_bp.route('/start', methods=['POST'])
@require_roles('tourguide')
def start_tour(ctx):
    """POST /api/tour/start  Body: {bookingId}"""
    data = request.get_json(silent=True) or {}
    if not data.get('bookingId'):
        return jsonify({'error': 'bookingId is required'}), 400
    booking = BookingService.start_tour(ctx, data['bookingId'])
    return jsonify({"booking": booking.to_dict()}), 200


@tour_ops_bp.route('/end', methods=['POST'])
@require_roles('tourguide')
def end_tour(ctx):
    """POST /api/tour/end  Body: {bookingId}"""
    data = request.get_json(silent=True) or {}
    if not data.get('bookingId'):
        return jsonify({'error': 'bookingId is required'}), 400
    booking = BookingService.end_tour(ctx, data['bookingId'])
    return jsonify({"booking": booking.to_dict()}), 200
