from flask import Blueprint, jsonify, request

from tourbook.auth import require_auth
from tourbook.services.location_service import LocationService

location_bp = Blueprint('location', __name__)


@location_bp.route('/update', methods=['POST'])
@require_auth
def update_location(ctx):
    """
    POST /api/location/update
    Body: {bookingId, latitude, longitude, accuracy?, altitude?, speed?, heading?}
    """
    data = request.get_json(silent=True) or {}
    return jsonify({"location": LocationService.update_location(ctx, data)}), 201


@location_bp.route('/<int:booking_id>', methods=['GET'])
@require_auth
def booking_locations(booking_id, ctx):
    return jsonify(LocationService.get_booking_locations(ctx, booking_id)), 200


@location_bp.route('/history/<int:booking_id>/<int:user_id>', methods=['GET'])
@require_auth
def location_history(booking_id, user_id, ctx):
    limit = request.args.get('limit', 100, type=int)
    history = LocationService.get_location_history(ctx, booking_id, user_id, limit)
    return jsonify({"history": history}), 200
