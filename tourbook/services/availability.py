"""
Date-range availability of drivers and tour guides.

Two bookings overlap when ``start_date <= other.end AND end_date >= other.start``.
Bookings that are pending, confirmed or in progress hold their people;
completed and cancelled ones do not.
"""
from sqlalchemy import func

from tourbook.extensions import db
from tourbook.models import BLOCKING_STATUSES, Booking, Driver, Rating, TourGuide, User


def overlapping_bookings(column, person_id, start, end, exclude_booking_id=None):
    """Query of blocking bookings where ``column`` == person_id overlapping [start, end]"""
    query = Booking.query.filter(
        column == person_id,
        Booking.status.in_(BLOCKING_STATUSES),
        Booking.start_date <= end,
        Booking.end_date >= start,
    )
    if exclude_booking_id is not None:
        query = query.filter(Booking.booking_id != exclude_booking_id)
    return query


def is_driver_available(driver_id, start, end, exclude_booking_id=None):
    return overlapping_bookings(
        Booking.driver_id, driver_id, start, end, exclude_booking_id
    ).first() is None


def is_guide_available(guide_id, start, end, exclude_booking_id=None):
    return overlapping_bookings(
        Booking.tour_guide_id, guide_id, start, end, exclude_booking_id
    ).first() is None


def _busy_ids(column, start, end):
    rows = (
        db.session.query(column)
        .filter(
            column.isnot(None),
            Booking.status.in_(BLOCKING_STATUSES),
            Booking.start_date <= end,
            Booking.end_date >= start,
        )
        .distinct()
        .all()
    )
    return {row[0] for row in rows}


def _trip_counts(column):
    rows = (
        db.session.query(column, func.count(Booking.booking_id))
        .filter(column.isnot(None), Booking.status != 'cancelled')
        .group_by(column)
        .all()
    )
    return dict(rows)


def _average_ratings(subject_type):
    rows = (
        db.session.query(Rating.subject_id, func.avg(Rating.rating))
        .filter(Rating.subject_type == subject_type)
        .group_by(Rating.subject_id)
        .all()
    )
    return {subject_id: round(float(avg), 2) for subject_id, avg in rows}


def available_drivers(start=None, end=None, include_busy=False):
    """
    List drivers with trip counts and ratings.

    With a date range, drivers with an overlapping booking are marked busy
    and left out unless ``include_busy`` is set.
    """
    busy = _busy_ids(Booking.driver_id, start, end) if start and end else set()
    trips = _trip_counts(Booking.driver_id)
    averages = _average_ratings('driver')

    drivers = []
    for driver, user in db.session.query(Driver, User).join(User, User.user_id == Driver.driver_id).all():
        is_busy = driver.driver_id in busy
        if is_busy and not include_busy:
            continue
        drivers.append({
            "driver_id": driver.driver_id,
            "name": user.full_name or user.username,
            "email": user.email,
            "phone_number": user.phone_number,
            "license_number": driver.license_number,
            "vehicle_type": driver.vehicle_type,
            "picture": driver.picture,
            "total_trips": trips.get(driver.driver_id, 0),
            "average_rating": averages.get(driver.driver_id, driver.rating or 0.0),
            "availability": "busy" if is_busy else "available",
        })
    drivers.sort(key=lambda d: (-d["average_rating"], -d["total_trips"]))
    return drivers


def available_tour_guides(start=None, end=None, include_busy=False):
    """Same as available_drivers, for tour guides"""
    busy = _busy_ids(Booking.tour_guide_id, start, end) if start and end else set()
    tours = _trip_counts(Booking.tour_guide_id)
    averages = _average_ratings('tourguide')

    guides = []
    for guide, user in db.session.query(TourGuide, User).join(User, User.user_id == TourGuide.tour_guide_id).all():
        is_busy = guide.tour_guide_id in busy
        if is_busy and not include_busy:
            continue
        guides.append({
            "tour_guide_id": guide.tour_guide_id,
            "name": user.full_name or user.username,
            "email": user.email,
            "phone_number": user.phone_number,
            "license_number": guide.license_number,
            "experience_years": guide.experience_years,
            "specialization": guide.specialization,
            "total_tours": tours.get(guide.tour_guide_id, 0),
            "average_rating": averages.get(guide.tour_guide_id, guide.rating or 0.0),
            "availability": "busy" if is_busy else "available",
        })
    guides.sort(key=lambda g: (-g["average_rating"], -g["total_tours"]))
    return guides
