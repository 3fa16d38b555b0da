"""
Post-trip ratings for the guide, the driver and the tour.
"""
import logging

from sqlalchemy import func

from tourbook.database import transaction
from tourbook.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from tourbook.extensions import db
from tourbook.models import Booking, Driver, Rating, TourGuide, User
from tourbook.utils import isoformat, validate_rating

logger = logging.getLogger(__name__)

# wire field -> (subject_type, review field)
RATING_FIELDS = (
    ('rating_tourguide', 'tourguide', 'review_tourguide'),
    ('rating_driver', 'driver', 'review_driver'),
    ('rating_tour', 'tour', 'review_tour'),
)


def _refresh_average(record, subject_type, subject_id):
    avg, count = (
        db.session.query(func.avg(Rating.rating), func.count(Rating.rating_id))
        .filter(Rating.subject_type == subject_type, Rating.subject_id == subject_id)
        .one()
    )
    record.rating = round(float(avg), 2) if avg is not None else 0.0
    record.total_ratings = count


class RatingService:

    @staticmethod
    def can_rate_booking(user_id, booking_id):
        """Only the booking's customer, and only once it is completed"""
        booking = db.session.get(Booking, booking_id)
        return bool(booking and booking.user_id == user_id and booking.status == 'completed')

    @staticmethod
    def has_rating(booking_id, subject_type=None):
        query = Rating.query.filter_by(booking_id=booking_id)
        if subject_type:
            query = query.filter_by(subject_type=subject_type)
        return query.first() is not None

    @staticmethod
    def get_ratings_for_booking(booking_id):
        ratings = Rating.query.filter_by(booking_id=booking_id).order_by(Rating.rating_id).all()
        return {r.subject_type: r.to_dict() for r in ratings}

    @staticmethod
    def rating_status(ctx, booking_id):
        return {
            "can_rate": RatingService.can_rate_booking(ctx.user_id, booking_id),
            "has_rating": RatingService.has_rating(booking_id),
            "rating": RatingService.get_ratings_for_booking(booking_id) or None,
        }

    @staticmethod
    def submit_rating(ctx, data):
        """
        Store one rating per subject named in the body and refresh the
        guide/driver averages.

        Raises:
            ValidationError: no rating given, or a value outside 1-5
            AuthorizationError: booking not the caller's or not completed
            ConflictError: that subject was already rated for this booking
        """
        booking_id = data.get('booking_id')
        if not booking_id:
            raise ValidationError('booking_id is required')
        wanted = [
            (subject_type, validate_rating(data[field], field), data.get(review))
            for field, subject_type, review in RATING_FIELDS
            if data.get(field) not in (None, '')
        ]
        if not wanted:
            raise ValidationError('At least one rating is required')

        with transaction(duplicate_message='Booking already rated'):
            booking = db.session.get(Booking, booking_id)
            if not booking:
                raise NotFoundError('Booking not found')
            if not RatingService.can_rate_booking(ctx.user_id, booking.booking_id):
                raise AuthorizationError('You can only rate your own completed bookings')

            created = []
            for subject_type, value, comment in wanted:
                if subject_type == 'tourguide':
                    subject_id = booking.tour_guide_id
                elif subject_type == 'driver':
                    subject_id = booking.driver_id
                else:
                    subject_id = booking.tour_id
                if subject_id is None:
                    raise ValidationError(f'Booking has no {subject_type} to rate')
                if RatingService.has_rating(booking.booking_id, subject_type):
                    raise ConflictError(f'{subject_type} already rated for this booking')
                rating = Rating(
                    booking_id=booking.booking_id,
                    customer_id=ctx.user_id,
                    subject_type=subject_type,
                    subject_id=subject_id,
                    rating=value,
                    comment=comment,
                )
                db.session.add(rating)
                created.append(rating)
            db.session.flush()

            if booking.tour_guide_id and any(r.subject_type == 'tourguide' for r in created):
                _refresh_average(db.session.get(TourGuide, booking.tour_guide_id),
                                 'tourguide', booking.tour_guide_id)
            if booking.driver_id and any(r.subject_type == 'driver' for r in created):
                _refresh_average(db.session.get(Driver, booking.driver_id),
                                 'driver', booking.driver_id)

        logger.info("Booking %s rated by user %s: %s", booking.booking_id, ctx.user_id,
                    ", ".join(r.subject_type for r in created))
        return [r.to_dict() for r in created]

    @staticmethod
    def list_guide_ratings(ctx):
        """Guide ratings with booking and customer context, for HR"""
        if ctx.role not in ('admin', 'employee'):
            raise AuthorizationError('Staff access required')
        rows = (
            db.session.query(Rating, Booking, User)
            .join(Booking, Booking.booking_id == Rating.booking_id)
            .join(User, User.user_id == Rating.customer_id)
            .filter(Rating.subject_type == 'tourguide')
            .order_by(Rating.created_at.desc(), Rating.rating_id.desc())
            .all()
        )
        results = []
        for rating, booking, customer in rows:
            guide = db.session.get(User, rating.subject_id)
            data = rating.to_dict()
            data.update({
                "tour_name": booking.tour.name if booking.tour else None,
                "customer_name": customer.full_name or customer.username,
                "tour_guide_name": guide.full_name if guide else None,
            })
            results.append(data)
        return results

    @staticmethod
    def get_my_ratings(ctx):
        """
        Ratings the calling guide or driver received, newest first.

        Returns:
            dict: {ratings, average_rating, total_ratings}
        """
        if ctx.role not in ('tourguide', 'driver'):
            raise AuthorizationError('Only tour guides and drivers receive ratings')
        rows = (
            db.session.query(Rating, Booking, User)
            .join(Booking, Booking.booking_id == Rating.booking_id)
            .join(User, User.user_id == Rating.customer_id)
            .filter(Rating.subject_type == ctx.role, Rating.subject_id == ctx.user_id)
            .order_by(Rating.created_at.desc(), Rating.rating_id.desc())
            .all()
        )
        ratings = []
        for rating, booking, customer in rows:
            data = rating.to_dict()
            data.update({
                "customer_name": customer.full_name or customer.username,
                "tour_name": booking.tour.name if booking.tour else None,
                "destination": booking.tour.destination if booking.tour else None,
                "start_date": isoformat(booking.start_date),
                "end_date": isoformat(booking.end_date),
            })
            ratings.append(data)
        average = round(sum(r["rating"] for r in ratings) / len(ratings), 2) if ratings else 0.0
        return {"ratings": ratings, "average_rating": average, "total_ratings": len(ratings)}
