"""
Payments and refunds.

A booking has at most one payment. Paying confirms the booking and gives
it its own copy of the tour itinerary, all in one transaction.
"""
import logging
from datetime import timedelta
from decimal import Decimal, InvalidOperation

from flask import current_app

from tourbook.database import get_for_update, transaction
from tourbook.errors import (
    AuthorizationError, ConflictError, NotFoundError, ValidationError,
)
from tourbook.extensions import db
from tourbook.models import Booking, Payment, User
from tourbook.models.base import utcnow
from tourbook.services.accounts import Employee
from tourbook.services.itinerary_service import ItineraryService
from tourbook.services.notification_service import REFUND_REQUEST, NotificationService
from tourbook.utils import require_fields, to_float

logger = logging.getLogger(__name__)

REFUND_REQUESTED = 'REFUND_REQUESTED'
REFUND_APPROVED = 'APPROVED'


class PaymentService:

    @staticmethod
    def create_payment(ctx, data):
        """
        Record a completed payment for one of the caller's bookings.

        Returns:
            dict: {"payment_id": id}

        Raises:
            NotFoundError: booking missing or not the caller's
            ConflictError: the booking already has a payment
        """
        require_fields(data, ('bookingId', 'amount', 'paymentMethod'))
        try:
            amount = Decimal(str(data['amount']))
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError('amount must be a number')
        if amount <= 0:
            raise ValidationError('amount must be positive')

        with transaction():
            booking = get_for_update(Booking, data['bookingId'])
            if not booking or booking.user_id != ctx.user_id:
                raise NotFoundError('Booking not found')
            if booking.status == 'cancelled':
                raise ConflictError('Booking is cancelled')
            existing = Payment.query.filter_by(booking_id=booking.booking_id).first()
            if existing:
                raise ConflictError('Payment already exists for this booking')

            payment = Payment(
                booking_id=booking.booking_id,
                amount=amount,
                payment_method=data['paymentMethod'],
                transaction_id=data.get('transactionId'),
                status='completed',
            )
            db.session.add(payment)
            booking.status = 'confirmed'
            if booking.tour_id:
                ItineraryService.copy_tour_days(booking.booking_id, booking.tour_id)

        logger.info("Payment %s recorded for booking %s", payment.payment_id, booking.booking_id)
        return {"payment_id": payment.payment_id}

    @staticmethod
    def get_payment_for_booking(ctx, booking_id):
        booking = db.session.get(Booking, booking_id)
        if not booking:
            raise NotFoundError('Booking not found')
        if ctx.role not in ('admin', 'employee') and booking.user_id != ctx.user_id:
            raise AuthorizationError('Not allowed to view this payment')
        if not booking.payment:
            raise NotFoundError('No payment for this booking')
        return booking.payment.to_dict()

    @staticmethod
    def customer_refund_request(ctx, booking_id, reason=None):
        """
        Customer asks for a refund within REFUND_WINDOW_HOURS of booking.
        HR is notified through the employee inbox.
        """
        if not booking_id:
            raise ValidationError('bookingId is required')
        window_hours = current_app.config['REFUND_WINDOW_HOURS']
        window = timedelta(hours=window_hours)

        with transaction():
            booking = get_for_update(Booking, booking_id)
            if not booking or booking.user_id != ctx.user_id:
                raise NotFoundError('Booking not found')
            if utcnow() - booking.booking_date > window:
                raise ConflictError(f'Refunds can only be requested within {window_hours} hours of booking')
            payment = booking.payment
            if not payment or payment.status != 'completed':
                raise ConflictError('No completed payment to refund')
            if payment.refund_request:
                raise ConflictError('A refund has already been requested')

            payment.refund_request = REFUND_REQUESTED
            payment.refund_reason = reason
            customer = db.session.get(User, ctx.user_id)
            message = f'Refund requested for booking #{booking.booking_id}'
            if reason:
                message += f': {reason}'
            NotificationService.notify(REFUND_REQUEST, booking, customer, message)
        return payment.to_dict()

    @staticmethod
    def employee_refund_request(ctx, booking_id):
        """
        HR flags a booking's payment for refund.

        Repeating the request is not an error; the message says what state
        the payment is already in.
        """
        if ctx.role != 'employee' or not Employee.is_hr(ctx.user_id):
            raise AuthorizationError('HR access required')
        if not booking_id:
            raise ValidationError('bookingId is required')

        with transaction():
            payment = (
                Payment.query.filter_by(booking_id=booking_id)
                .with_for_update()
                .first()
            )
            if not payment:
                raise NotFoundError('Payment not found for booking')
            if payment.status == 'refunded':
                return {"message": "Payment already refunded", "payment": payment.to_dict()}
            if payment.refund_request == REFUND_REQUESTED:
                return {"message": "Refund already requested", "payment": payment.to_dict()}
            if payment.status != 'completed':
                raise ConflictError('Only completed payments can be refunded')
            payment.refund_request = REFUND_REQUESTED
        return {"message": "Refund requested", "payment": payment.to_dict()}

    @staticmethod
    def list_refund_requests(ctx):
        if ctx.role != 'admin':
            raise AuthorizationError('Admin access required')
        payments = (
            Payment.query.filter(Payment.refund_request == REFUND_REQUESTED)
            .order_by(Payment.payment_date.desc())
            .all()
        )
        results = []
        for payment in payments:
            booking = payment.booking
            data = payment.to_dict()
            data.update({
                "booking_status": booking.status,
                "tour_name": booking.tour.name if booking.tour else None,
                "customer_name": booking.user.full_name if booking.user else None,
                "customer_email": booking.user.email if booking.user else None,
                "total_price": to_float(booking.total_price),
            })
            results.append(data)
        return results

    @staticmethod
    def approve_refund(ctx, payment_id):
        """Admin refunds a payment with a pending request and cancels the booking"""
        if ctx.role != 'admin':
            raise AuthorizationError('Admin access required')
        if not payment_id:
            raise ValidationError('paymentId is required')

        with transaction():
            payment = get_for_update(Payment, payment_id)
            if not payment:
                raise NotFoundError('Payment not found')
            if payment.status != 'completed' or payment.refund_request != REFUND_REQUESTED:
                raise ConflictError('Payment has no pending refund request')
            payment.status = 'refunded'
            payment.refund_request = REFUND_APPROVED
            payment.booking.status = 'cancelled'

        logger.info("Admin %s approved refund for payment %s", ctx.user_id, payment_id)
        return payment.to_dict()
