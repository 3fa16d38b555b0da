from flask import Blueprint, jsonify, request

from tourbook.auth import require_auth, require_roles
from tourbook.services.payment_service import PaymentService

payments_bp = Blueprint('payments', __name__)


@payments_bp.route('', methods=['POST'])
@require_roles('customer')
def create_payment(ctx):
    """
    Pay for a booking
    POST /api/payments
    Body: {bookingId, amount, paymentMethod, transactionId?}
    """
    data = request.get_json(silent=True) or {}
    return jsonify(PaymentService.create_payment(ctx, data)), 201


@payments_bp.route('/booking/<int:booking_id>', methods=['GET'])
@require_auth
def payment_for_booking(booking_id, ctx):
    return jsonify({"payment": PaymentService.get_payment_for_booking(ctx, booking_id)}), 200


@payments_bp.route('/customer-refund-request', methods=['POST'])
@require_roles('customer')
def customer_refund_request(ctx):
    """
    Customer refund within 24 hours of booking
    POST /api/payments/customer-refund-request
    Body: {bookingId, reason?}
    """
    data = request.get_json(silent=True) or {}
    payment = PaymentService.customer_refund_request(ctx, data.get('bookingId'), data.get('reason'))
    return jsonify({"message": "Refund requested", "payment": payment}), 200


@payments_bp.route('/refund-request', methods=['POST'])
@require_roles('employee')
def employee_refund_request(ctx):
    """
    HR marks a booking's payment for refund
    POST /api/payments/refund-request
    Body: {bookingId}
    """
    data = request.get_json(silent=True) or {}
    return jsonify(PaymentService.employee_refund_request(ctx, data.get('bookingId'))), 200


@payments_bp.route('/refund-requests', methods=['GET'])
@require_roles('admin')
def refund_requests(ctx):
    return jsonify({"refund_requests": PaymentService.list_refund_requests(ctx)}), 200


@payments_bp.route('/refund-approve', methods=['POST'])
@require_roles('admin')
def refund_approve(ctx):
    """
    POST /api/payments/refund-approve
    Body: {paymentId}
    """
    data = request.get_json(silent=True) or {}
    payment = PaymentService.approve_refund(ctx, data.get('paymentId'))
    return jsonify({"message": "Refund approved", "payment": payment}), 200
