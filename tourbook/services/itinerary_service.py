"""
Tour itinerary templates and each booking's editable copy.
"""
import logging

from tourbook.database import get_for_update, transaction
from tourbook.errors import (
    AuthorizationError, ConflictError, NotFoundError, ValidationError,
)
from tourbook.extensions import db
from tourbook.models import (
    EDITABLE_DAY_FIELDS, ITINERARY_REQUEST_TYPES, Booking, CustomItineraryDay,
    ItineraryDay, ItineraryRequest, Tour,
)
from tourbook.models.base import utcnow
from tourbook.utils import coerce_id, require_fields

logger = logging.getLogger(__name__)


def _can_edit_days(ctx, booking):
    """Staff and the booking's own guide"""
    if ctx.role in ('admin', 'employee'):
        return True
    return ctx.role == 'tourguide' and booking.tour_guide_id == ctx.user_id


class ItineraryService:

    @staticmethod
    def get_tour_itinerary(tour_id):
        if not db.session.get(Tour, tour_id):
            raise NotFoundError('Tour not found')
        days = (
            ItineraryDay.query.filter_by(tour_id=tour_id)
            .order_by(ItineraryDay.day_number, ItineraryDay.itinerary_id)
            .all()
        )
        return [day.to_dict() for day in days]

    @staticmethod
    def get_custom_itinerary(booking_id):
        days = (
            CustomItineraryDay.query.filter_by(booking_id=booking_id)
            .order_by(CustomItineraryDay.day_number, CustomItineraryDay.custom_itinerary_id)
            .all()
        )
        return [day.to_dict() for day in days]

    @staticmethod
    def copy_tour_days(booking_id, tour_id):
        """
        Replace the booking's days with the tour template, renumbered 1..N.

        Runs on the caller's session without committing.
        """
        template = (
            ItineraryDay.query.filter_by(tour_id=tour_id)
            .order_by(ItineraryDay.day_number, ItineraryDay.itinerary_id)
            .all()
        )
        CustomItineraryDay.query.filter_by(booking_id=booking_id).delete(synchronize_session=False)
        db.session.flush()
        for number, day in enumerate(template, start=1):
            db.session.add(CustomItineraryDay(
                booking_id=booking_id,
                day_number=number,
                title=day.title,
                description=day.description,
                activities=list(day.activities or []),
                accommodation=day.accommodation,
                meals=day.meals,
                is_modified=False,
            ))
        return len(template)

    @staticmethod
    def create_custom_itinerary_from_tour(booking_id, tour_id):
        with transaction():
            if not db.session.get(Booking, booking_id):
                raise NotFoundError('Booking not found')
            if not db.session.get(Tour, tour_id):
                raise NotFoundError('Tour not found')
            count = ItineraryService.copy_tour_days(booking_id, tour_id)
        return count

    @staticmethod
    def copy_for_booking(ctx, booking_id, tour_id=None):
        """
        Copy the booking's own tour template into its itinerary.

        Any participant may create the first copy. Replacing an existing
        copy discards edited days, so only staff and the assigned guide
        may do it.

        Raises:
            ValidationError: booking has no tour, or ``tour_id`` names another tour
            AuthorizationError: caller may not view, or may not reset, the itinerary
        """
        tour_id = coerce_id(tour_id, 'tourId')
        with transaction():
            booking = get_for_update(Booking, booking_id)
            if not booking:
                raise NotFoundError('Booking not found')
            ItineraryService.ensure_can_view(ctx, booking)
            if booking.tour_id is None:
                raise ValidationError('Booking has no tour')
            if tour_id is not None and tour_id != booking.tour_id:
                raise ValidationError("tourId does not match the booking's tour")
            has_days = CustomItineraryDay.query.filter_by(booking_id=booking.booking_id).first() is not None
            if has_days and not _can_edit_days(ctx, booking):
                raise AuthorizationError('Only staff or the assigned guide can reset an itinerary')
            count = ItineraryService.copy_tour_days(booking.booking_id, booking.tour_id)
        logger.info("Itinerary of booking %s copied from tour %s by user %s",
                    booking.booking_id, booking.tour_id, ctx.user_id)
        return count

    @staticmethod
    def ensure_can_view(ctx, booking):
        if ctx.role in ('admin', 'employee'):
            return
        if booking.participant_role(ctx.user_id) is None:
            raise AuthorizationError('Not allowed to view this itinerary')

    @staticmethod
    def submit_itinerary_request(ctx, data):
        """Customer asks for a change to their booking's itinerary"""
        require_fields(data, ('bookingId', 'requestType', 'requestedChanges'))
        request_type = data['requestType']
        if request_type not in ITINERARY_REQUEST_TYPES:
            raise ValidationError(
                'requestType must be one of: ' + ', '.join(ITINERARY_REQUEST_TYPES)
            )
        day_number = data.get('dayNumber')
        if day_number is not None:
            try:
                day_number = int(day_number)
            except (TypeError, ValueError):
                raise ValidationError('dayNumber must be a number')

        with transaction():
            booking = db.session.get(Booking, data['bookingId'])
            if not booking or booking.user_id != ctx.user_id:
                raise NotFoundError('Booking not found')
            if booking.status in ('completed', 'cancelled'):
                raise ConflictError(f'Cannot change the itinerary of a {booking.status} booking')
            itinerary_request = ItineraryRequest(
                booking_id=booking.booking_id,
                user_id=ctx.user_id,
                request_type=request_type,
                requested_changes=data['requestedChanges'],
                day_number=day_number,
                reason=data.get('reason'),
                status='pending',
            )
            db.session.add(itinerary_request)
        return itinerary_request.request_id

    @staticmethod
    def list_itinerary_requests(ctx, booking_id):
        booking = db.session.get(Booking, booking_id)
        if not booking:
            raise NotFoundError('Booking not found')
        ItineraryService.ensure_can_view(ctx, booking)
        requests = (
            ItineraryRequest.query.filter_by(booking_id=booking_id)
            .order_by(ItineraryRequest.created_at.desc(), ItineraryRequest.request_id.desc())
            .all()
        )
        return [r.to_dict() for r in requests]

    @staticmethod
    def process_itinerary_request(ctx, request_id, status):
        if ctx.role not in ('admin', 'employee'):
            raise AuthorizationError('Staff access required')
        if status not in ('approved', 'rejected'):
            raise ValidationError("status must be 'approved' or 'rejected'")
        with transaction():
            itinerary_request = get_for_update(ItineraryRequest, request_id)
            if not itinerary_request:
                raise NotFoundError('Itinerary request not found')
            if itinerary_request.status != 'pending':
                raise ConflictError('Itinerary request has already been processed')
            itinerary_request.status = status
            itinerary_request.processed_at = utcnow()
            itinerary_request.processed_by = ctx.user_id
        logger.info("Itinerary request %s %s by user %s", request_id, status, ctx.user_id)
        return itinerary_request.to_dict()

    @staticmethod
    def update_custom_itinerary_day(ctx, booking_id, day_number, fields):
        """
        Overwrite whichever editable fields are present and mark the day modified.

        Only staff and the booking's own guide may edit.
        """
        updates = {name: fields[name] for name in EDITABLE_DAY_FIELDS if name in fields}
        if not updates:
            raise ValidationError(
                'Nothing to update; send any of: ' + ', '.join(EDITABLE_DAY_FIELDS)
            )
        if 'activities' in updates and not isinstance(updates['activities'], list):
            raise ValidationError('activities must be a list')

        with transaction():
            booking = db.session.get(Booking, booking_id)
            if not booking:
                raise NotFoundError('Booking not found')
            if not _can_edit_days(ctx, booking):
                raise AuthorizationError('Not allowed to edit this itinerary')
            day = CustomItineraryDay.query.filter_by(
                booking_id=booking_id, day_number=day_number
            ).first()
            if not day:
                raise NotFoundError(f'Day {day_number} not found for this booking')
            for name, value in updates.items():
                setattr(day, name, value)
            day.is_modified = True
        return day.to_dict()
