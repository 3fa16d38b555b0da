"""
Itinerary routes: tour templates, booking copies and change requests
"""
from flask import Blueprint, jsonify, request

from tourbook.auth import require_auth, require_roles
from tourbook.errors import NotFoundError
from tourbook.extensions import db
from tourbook.models import Booking
from tourbook.services.itinerary_service import ItineraryService

itineraries_bp = Blueprint('itineraries', __name__)


@itineraries_bp.route('/tour/<int:tour_id>', methods=['GET'])
def tour_itinerary(tour_id):
    return jsonify({"itinerary": ItineraryService.get_tour_itinerary(tour_id)}), 200


@itineraries_bp.route('/booking/<int:booking_id>', methods=['GET'])
@require_auth
def booking_itinerary(booking_id, ctx):
    booking = db.session.get(Booking, booking_id)
    if not booking:
        raise NotFoundError('Booking not found')
    ItineraryService.ensure_can_view(ctx, booking)
    return jsonify({
        "booking_id": booking_id,
        "itinerary": ItineraryService.get_custom_itinerary(booking_id),
    }), 200


@itineraries_bp.route('/booking/<int:booking_id>', methods=['POST'])
@require_auth
def create_booking_itinerary(booking_id, ctx):
    """
    Copy the booking's tour template into the booking
    POST /api/itineraries/booking/<bookingId>
    Body: {tourId?} (must match the booking's tour when given)
    """
    data = request.get_json(silent=True) or {}
    count = ItineraryService.copy_for_booking(ctx, booking_id, data.get('tourId'))
    return jsonify({"booking_id": booking_id, "days": count}), 201


@itineraries_bp.route('/booking/<int:booking_id>/days/<int:day_number>', methods=['PUT'])
@require_auth
def update_day(booking_id, day_number, ctx):
    """
    PUT /api/itineraries/booking/<bookingId>/days/<n>
    Body: any of {title, description, activities, accommodation, meals}
    """
    data = request.get_json(silent=True) or {}
    day = ItineraryService.update_custom_itinerary_day(ctx, booking_id, day_number, data)
    return jsonify({"day": day}), 200


@itineraries_bp.route('/requests', methods=['POST'])
@require_roles('customer')
def submit_request(ctx):
    """
    POST /api/itineraries/requests
    Body: {bookingId, requestType: modification|addition|removal, requestedChanges, dayNumber?, reason?}
    """
    data = request.get_json(silent=True) or {}
    request_id = ItineraryService.submit_itinerary_request(ctx, data)
    return jsonify({"request_id": request_id}), 201


@itineraries_bp.route('/requests/<int:booking_id>', methods=['GET'])
@require_auth
def list_requests(booking_id, ctx):
    return jsonify({"requests": ItineraryService.list_itinerary_requests(ctx, booking_id)}), 200


@itineraries_bp.route('/requests/item/<int:request_id>', methods=['PUT'])
@require_roles('admin', 'employee')
def process_request(request_id, ctx):
    """Body: {status: approved|rejected}"""
    data = request.get_json(silent=True) or {}
    result = ItineraryService.process_itinerary_request(ctx, request_id, data.get('status'))
    return jsonify({"request": result}), 200
