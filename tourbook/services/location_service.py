"""
Live location sharing between a booking's customer, guide and driver.

Access follows the booking's current assignment, so a guide or driver
replaced through a change request loses it immediately.
"""
import logging
from datetime import timedelta

from sqlalchemy import func

from tourbook.database import transaction
from tourbook.errors import AuthorizationError, NotFoundError, ValidationError
from tourbook.extensions import db
from tourbook.models import Booking, LocationPing, User
from tourbook.models.base import utcnow
from tourbook.utils import validate_coordinates

logger = logging.getLogger(__name__)

TRACKING_ROLES = ('customer', 'tourguide', 'driver')
OBSERVER_ROLES = ('admin', 'employee')
OPTIONAL_READINGS = ('accuracy', 'altitude', 'speed', 'heading')


def _optional_float(data, name):
    value = data.get(name)
    if value in (None, ''):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{name} must be a number')


def _load_booking(ctx, booking_id):
    booking = db.session.get(Booking, booking_id)
    if not booking:
        raise NotFoundError('Booking not found')
    if ctx.role not in OBSERVER_ROLES and booking.participant_role(ctx.user_id) is None:
        raise AuthorizationError('Not a participant of this booking')
    return booking


class LocationService:

    @staticmethod
    def update_location(ctx, data):
        """Append a GPS ping for the caller on one of their bookings"""
        if ctx.role not in TRACKING_ROLES:
            raise AuthorizationError('Only customers, tour guides and drivers share location')
        booking_id = data.get('bookingId')
        if not booking_id:
            raise ValidationError('bookingId is required')
        latitude, longitude = validate_coordinates(data.get('latitude'), data.get('longitude'))
        readings = {name: _optional_float(data, name) for name in OPTIONAL_READINGS}

        with transaction():
            booking = db.session.get(Booking, booking_id)
            if not booking:
                raise NotFoundError('Booking not found')
            slot = booking.participant_role(ctx.user_id)
            if slot is None or slot != ctx.role:
                raise AuthorizationError('Not a participant of this booking')
            ping = LocationPing(
                booking_id=booking.booking_id,
                user_id=ctx.user_id,
                user_type=slot,
                latitude=latitude,
                longitude=longitude,
                **readings,
            )
            db.session.add(ping)
        return ping.to_dict()

    @staticmethod
    def get_booking_locations(ctx, booking_id):
        """Each current participant with their latest ping (or None)"""
        booking = _load_booking(ctx, booking_id)

        participants = [('customer', booking.user_id)]
        if booking.tour_guide_id:
            participants.append(('tourguide', booking.tour_guide_id))
        if booking.driver_id:
            participants.append(('driver', booking.driver_id))

        latest = (
            db.session.query(LocationPing.user_id, func.max(LocationPing.location_id))
            .filter(LocationPing.booking_id == booking.booking_id)
            .group_by(LocationPing.user_id)
            .all()
        )
        latest_ids = dict(latest)

        results = []
        for user_type, user_id in participants:
            user = db.session.get(User, user_id)
            ping_id = latest_ids.get(user_id)
            ping = db.session.get(LocationPing, ping_id) if ping_id else None
            results.append({
                "user_id": user_id,
                "user_type": user_type,
                "name": (user.full_name or user.username) if user else None,
                "location": ping.to_dict() if ping else None,
            })
        return {"booking_id": booking.booking_id, "status": booking.status, "participants": results}

    @staticmethod
    def get_location_history(ctx, booking_id, user_id, limit=100):
        booking = _load_booking(ctx, booking_id)
        if booking.participant_role(user_id) is None:
            raise NotFoundError('User is not a participant of this booking')
        limit = max(1, min(int(limit), 1000))
        pings = (
            LocationPing.query
            .filter_by(booking_id=booking.booking_id, user_id=user_id)
            .order_by(LocationPing.timestamp.desc(), LocationPing.location_id.desc())
            .limit(limit)
            .all()
        )
        return [p.to_dict() for p in pings]

    @staticmethod
    def cleanup_old_locations(days=30):
        """Delete pings older than ``days``; returns the count removed"""
        cutoff = utcnow() - timedelta(days=days)
        with transaction():
            deleted = (
                LocationPing.query
                .filter(LocationPing.timestamp < cutoff)
                .delete(synchronize_session=False)
            )
        logger.info("Purged %s location pings older than %s days", deleted, days)
        return deleted
