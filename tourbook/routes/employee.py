"""
HR employee dashboard routes
"""
from flask import Blueprint, jsonify, request

from tourbook.auth import require_hr
from tourbook.services.accounts import Employee
from tourbook.services.availability import available_tour_guides
from tourbook.services.booking_service import BookingService
from tourbook.services.notification_service import REFUND_REQUEST, NotificationService
from tourbook.services.rating_service import RatingService
from tourbook.utils import parse_date

employee_bp = Blueprint('employee', __name__)


@employee_bp.route('/notifications', methods=['GET'])
@require_hr
def list_notifications(ctx):
    """
    Inbox, refund requests by default
    GET /api/employee/notifications?type=change_request
    """
    return jsonify(NotificationService.list_for_employees(request.args.get('type', REFUND_REQUEST))), 200


@employee_bp.route('/notifications', methods=['POST'])
@require_hr
def mark_notifications(ctx):
    """
    Mark one notification (notificationId) or all of a type (markAll) read
    POST /api/employee/notifications
    """
    data = request.get_json(silent=True) or {}
    if data.get('markAll'):
        count = NotificationService.mark_all_read(data.get('type', REFUND_REQUEST))
        return jsonify({"updated": count}), 200
    if not data.get('notificationId'):
        return jsonify({'error': 'notificationId or markAll is required'}), 400
    notification = NotificationService.mark_read(data['notificationId'])
    return jsonify({"notification": notification.to_dict()}), 200


@employee_bp.route('/notifications', methods=['DELETE'])
@require_hr
def delete_notification(ctx):
    """DELETE /api/employee/notifications?id=1"""
    notification_id = request.args.get('id', type=int)
    if not notification_id:
        return jsonify({'error': 'id is required'}), 400
    NotificationService.delete(notification_id)
    return jsonify({"ok": True}), 200


@employee_bp.route('/bookings', methods=['GET'])
@require_hr
def list_bookings(ctx):
    return jsonify({"bookings": BookingService.list_bookings(request.args.get('status'))}), 200


@employee_bp.route('/tourguides', methods=['GET'])
@require_hr
def list_tour_guides(ctx):
    """GET /api/employee/tourguides?startDate=2025-06-01&endDate=2025-06-05"""
    start = request.args.get('startDate')
    end = request.args.get('endDate')
    if start and end:
        guides = available_tour_guides(parse_date(start, 'startDate'), parse_date(end, 'endDate'))
    else:
        guides = available_tour_guides()
    return jsonify({"tourguides": guides}), 200


@employee_bp.route('/assign-tourguide', methods=['POST'])
@require_hr
def assign_tour_guide(ctx):
    """
    Put a guide on a booking that has none
    POST /api/employee/assign-tourguide
    Body: {bookingId, tourGuideId}
    """
    data = request.get_json(silent=True) or {}
    booking = Employee.assign_tour_guide(ctx, data.get('bookingId'), data.get('tourGuideId'))
    return jsonify({"booking": booking.to_dict()}), 200


@employee_bp.route('/ratings', methods=['GET'])
@require_hr
def guide_ratings(ctx):
    return jsonify({"ratings": RatingService.list_guide_ratings(ctx)}), 200
