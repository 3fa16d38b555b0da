from flask import Blueprint, jsonify, request

from tourbook.auth import require_auth
from tourbook.services.change_request_service import ChangeRequestService

change_requests_bp = Blueprint('change_requests', __name__)


@change_requests_bp.route('', methods=['GET'])
@require_auth
def list_change_requests(ctx):
    return jsonify({"requests": ChangeRequestService.list_requests(ctx)}), 200


@change_requests_bp.route('', methods=['POST'])
@require_auth
def create_change_request(ctx):
    """
    Ask to replace the guide, the driver or both
    POST /api/change-requests
    Body: {bookingId, requestType: tour_guide|driver|both, reason}
    """
    data = request.get_json(silent=True) or {}
    change_request = ChangeRequestService.create_request(
        ctx, data.get('bookingId'), data.get('requestType'), data.get('reason')
    )
    return jsonify({"request": change_request}), 201


@change_requests_bp.route('/<int:request_id>/available', methods=['GET'])
@require_auth
def available_replacements(request_id, ctx):
    return jsonify(ChangeRequestService.available_replacements(ctx, request_id)), 200


@change_requests_bp.route('/<int:request_id>', methods=['PUT'])
@require_auth
def process_change_request(request_id, ctx):
    """
    Approve (with replacements) or reject
    PUT /api/change-requests/<id>
    Body: {status: approved|rejected, new_tour_guide_id?, new_driver_id?}
    """
    data = request.get_json(silent=True) or {}
    change_request = ChangeRequestService.process_request(
        ctx,
        request_id,
        data.get('status'),
        new_tour_guide_id=data.get('new_tour_guide_id'),
        new_driver_id=data.get('new_driver_id'),
    )
    return jsonify({"request": change_request}), 200


@change_requests_bp.route('/<int:request_id>', methods=['DELETE'])
@require_auth
def cancel_change_request(request_id, ctx):
    ChangeRequestService.cancel_request(ctx, request_id)
    return jsonify({"ok": True}), 200
