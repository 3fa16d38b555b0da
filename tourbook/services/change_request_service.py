"""
Guide and driver replacement workflow.

A customer (or HR) files a request against a confirmed or in-progress
booking. An admin or HR employee then rejects it, or approves it with a
replacement for every role it names. Approval rewrites the booking's
assignment and leaves the request in 'completed'; nothing else reassigns
a guide or driver once one is set.
"""
import logging

from sqlalchemy import case

from tourbook.database import get_for_update, transaction
from tourbook.errors import (
    AuthorizationError, ConflictError, DriverUnavailable, GuideUnavailable,
    NotFoundError, ValidationError,
)
from tourbook.extensions import db
from tourbook.models import (
    REQUEST_TYPES, Booking, ChangeRequest, Driver, TourGuide, User,
)
from tourbook.models.base import utcnow
from tourbook.services.accounts import Employee
from tourbook.services.availability import (
    available_drivers, available_tour_guides, is_driver_available, is_guide_available,
)
from tourbook.services.notification_service import CHANGE_REQUEST, NotificationService
from tourbook.utils import coerce_id

logger = logging.getLogger(__name__)

CHANGEABLE_STATUSES = ('confirmed', 'in-progress')
STATUS_ORDER = case(
    (ChangeRequest.status == 'pending', 0),
    (ChangeRequest.status == 'approved', 1),
    (ChangeRequest.status == 'completed', 2),
    (ChangeRequest.status == 'rejected', 3),
    else_=4,
)


def _is_processor(ctx):
    return ctx.role == 'admin' or (ctx.role == 'employee' and Employee.is_hr(ctx.user_id))


class ChangeRequestService:

    @staticmethod
    def create_request(ctx, booking_id, request_type, reason):
        """
        File a change request, snapshotting the booking's current guide and driver.

        Raises:
            ValidationError: bad type or empty reason
            NotFoundError: booking missing, or not the customer's own
            ConflictError: booking not changeable, or a request is already pending
        """
        if request_type not in REQUEST_TYPES:
            raise ValidationError('requestType must be one of: ' + ', '.join(REQUEST_TYPES))
        if not reason or not str(reason).strip():
            raise ValidationError('reason is required')
        if ctx.role not in ('customer', 'employee') or (
            ctx.role == 'employee' and not Employee.is_hr(ctx.user_id)
        ):
            raise AuthorizationError('Only customers or HR can request changes')

        with transaction():
            booking = get_for_update(Booking, booking_id)
            if not booking or (ctx.role == 'customer' and booking.user_id != ctx.user_id):
                raise NotFoundError('Booking not found')
            if booking.status not in CHANGEABLE_STATUSES:
                raise ConflictError('Changes can only be requested for confirmed or in-progress bookings')
            if request_type in ('tour_guide', 'both') and booking.tour_guide_id is None:
                raise ConflictError('Booking has no tour guide to replace')
            if request_type in ('driver', 'both') and booking.driver_id is None:
                raise ConflictError('Booking has no driver to replace')
            pending = ChangeRequest.query.filter_by(
                booking_id=booking.booking_id, status='pending'
            ).first()
            if pending:
                raise ConflictError('A change request for this booking is already pending')

            change_request = ChangeRequest(
                booking_id=booking.booking_id,
                user_id=ctx.user_id,
                request_type=request_type,
                current_tour_guide_id=booking.tour_guide_id,
                current_driver_id=booking.driver_id,
                reason=str(reason).strip(),
                status='pending',
            )
            db.session.add(change_request)

            customer = db.session.get(User, booking.user_id)
            label = {'tour_guide': 'tour guide', 'driver': 'driver', 'both': 'tour guide and driver'}
            NotificationService.notify(
                CHANGE_REQUEST, booking, customer,
                f'Change of {label[request_type]} requested for booking #{booking.booking_id}',
            )
        return change_request.to_dict()

    @staticmethod
    def list_requests(ctx):
        """Customers see their own; admins and HR see all, pending first"""
        query = ChangeRequest.query
        if ctx.role == 'customer':
            query = query.filter(ChangeRequest.user_id == ctx.user_id).order_by(
                ChangeRequest.created_at.desc(), ChangeRequest.request_id.desc()
            )
        elif _is_processor(ctx):
            query = query.order_by(STATUS_ORDER, ChangeRequest.created_at.desc(),
                                   ChangeRequest.request_id.desc())
        else:
            raise AuthorizationError('Not allowed to view change requests')

        results = []
        for change_request in query.all():
            data = change_request.to_dict()
            booking = change_request.booking
            data["tour_name"] = booking.tour.name if booking and booking.tour else None
            data["start_date"] = booking.start_date.isoformat() if booking else None
            data["end_date"] = booking.end_date.isoformat() if booking else None
            data["customer_name"] = change_request.user.full_name if change_request.user else None
            results.append(data)
        return results

    @staticmethod
    def available_replacements(ctx, request_id):
        """Guides and drivers free for the booking's dates, excluding the current ones"""
        if not _is_processor(ctx):
            raise AuthorizationError('Admin or HR access required')
        change_request = db.session.get(ChangeRequest, request_id)
        if not change_request:
            raise NotFoundError('Change request not found')
        booking = change_request.booking
        result = {"tour_guides": [], "drivers": []}
        if change_request.wants_guide:
            result["tour_guides"] = [
                g for g in available_tour_guides(booking.start_date, booking.end_date)
                if g["tour_guide_id"] != booking.tour_guide_id
            ]
        if change_request.wants_driver:
            result["drivers"] = [
                d for d in available_drivers(booking.start_date, booking.end_date)
                if d["driver_id"] != booking.driver_id
            ]
        return result

    @staticmethod
    def process_request(ctx, request_id, status, new_tour_guide_id=None, new_driver_id=None):
        """
        Approve or reject a pending request.

        Approval needs a replacement for every role the request names; each
        is checked for role and availability (with its row locked) before
        the booking is updated.
        """
        if not _is_processor(ctx):
            raise AuthorizationError('Admin or HR access required')
        if status not in ('approved', 'rejected'):
            raise ValidationError("status must be 'approved' or 'rejected'")
        new_tour_guide_id = coerce_id(new_tour_guide_id, 'new_tour_guide_id')
        new_driver_id = coerce_id(new_driver_id, 'new_driver_id')

        with transaction():
            change_request = get_for_update(ChangeRequest, request_id)
            if not change_request:
                raise NotFoundError('Change request not found')
            if change_request.status != 'pending':
                raise ConflictError('Change request has already been processed')

            change_request.processed_at = utcnow()
            change_request.processed_by = ctx.user_id

            if status == 'rejected':
                change_request.status = 'rejected'
            else:
                booking = get_for_update(Booking, change_request.booking_id)
                if change_request.wants_guide:
                    if not new_tour_guide_id:
                        raise ValidationError('new_tour_guide_id is required to approve this request')
                    guide = get_for_update(TourGuide, new_tour_guide_id)
                    if not guide or guide.user.role != 'tourguide':
                        raise NotFoundError('Tour guide not found')
                    if new_tour_guide_id == booking.tour_guide_id:
                        raise ValidationError('Replacement tour guide is already assigned')
                    if not is_guide_available(new_tour_guide_id, booking.start_date, booking.end_date,
                                              exclude_booking_id=booking.booking_id):
                        raise GuideUnavailable('Tour guide is already booked for these dates')
                    booking.tour_guide_id = new_tour_guide_id
                    change_request.new_tour_guide_id = new_tour_guide_id
                if change_request.wants_driver:
                    if not new_driver_id:
                        raise ValidationError('new_driver_id is required to approve this request')
                    driver = get_for_update(Driver, new_driver_id)
                    if not driver or driver.user.role != 'driver':
                        raise NotFoundError('Driver not found')
                    if new_driver_id == booking.driver_id:
                        raise ValidationError('Replacement driver is already assigned')
                    if not is_driver_available(new_driver_id, booking.start_date, booking.end_date,
                                               exclude_booking_id=booking.booking_id):
                        raise DriverUnavailable('Driver is already booked for these dates')
                    booking.driver_id = new_driver_id
                    change_request.new_driver_id = new_driver_id
                change_request.status = 'completed'

        logger.info("Change request %s %s by user %s", request_id, status, ctx.user_id)
        return change_request.to_dict()

    @staticmethod
    def cancel_request(ctx, request_id):
        """The customer withdraws their own pending request"""
        with transaction():
            change_request = get_for_update(ChangeRequest, request_id)
            if not change_request or change_request.user_id != ctx.user_id:
                raise NotFoundError('Change request not found')
            if change_request.status != 'pending':
                raise ConflictError('Only pending requests can be cancelled')
            db.session.delete(change_request)
