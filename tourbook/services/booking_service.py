"""
Booking creation, lookup and tour lifecycle.
"""
import logging
from decimal import Decimal, InvalidOperation

from tourbook.database import get_for_update, transaction
from tourbook.errors import (
    AuthorizationError, ConflictError, DriverUnavailable, InvalidDateRange, NotFoundError,
    TourUnavailable, ValidationError, VehicleUnavailable,
)
from tourbook.extensions import db
from tourbook.models import (
    Booking, ChangeRequest, Driver, Tour, User, Vehicle,
)
from tourbook.services.availability import is_driver_available
from tourbook.utils import parse_date, require_fields, to_float
from tourbook.utils.helpers import isoformat

logger = logging.getLogger(__name__)

STAFF_VIEWERS = ('admin', 'employee')


def _person(user):
    if user is None:
        return None
    return {
        "user_id": user.user_id,
        "name": user.full_name or user.username,
        "email": user.email,
        "phone_number": user.phone_number,
    }


class BookingService:

    @staticmethod
    def create_booking(ctx, data):
        """
        Create a pending booking for the logged-in customer.

        Checks run inside the transaction in this order: date range, tour
        availability, vehicle status, driver overlap. The driver row is
        locked before the overlap check so two requests for the same
        driver cannot both pass it.

        Returns:
            dict: {"booking_id": id}
        """
        require_fields(data, ('startDate', 'endDate', 'totalPrice', 'peopleCount'))
        tour_id = data.get('tourId')
        vehicle_id = data.get('vehicleId')
        driver_id = data.get('driverId')
        if not tour_id and not vehicle_id:
            raise ValidationError('Either tourId or vehicleId is required')

        start = parse_date(data['startDate'], 'startDate')
        end = parse_date(data['endDate'], 'endDate')
        try:
            total_price = Decimal(str(data['totalPrice']))
            people = int(data['peopleCount'])
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError('totalPrice and peopleCount must be numbers')
        if total_price < 0 or people < 1:
            raise ValidationError('totalPrice must be >= 0 and peopleCount >= 1')

        with transaction():
            if start >= end:
                raise InvalidDateRange('Start date must be before end date')

            tour = None
            if tour_id:
                tour = get_for_update(Tour, tour_id)
                if not tour:
                    raise NotFoundError('Tour not found')
                if not tour.availability:
                    raise TourUnavailable('Tour is not available')

            if vehicle_id:
                vehicle = get_for_update(Vehicle, vehicle_id)
                if not vehicle:
                    raise NotFoundError('Vehicle not found')
                if not vehicle.is_available:
                    raise VehicleUnavailable('Vehicle is not available')

            if driver_id:
                driver = get_for_update(Driver, driver_id)
                if not driver or driver.user.role != 'driver':
                    raise NotFoundError('Driver not found')
                if not is_driver_available(driver_id, start, end):
                    raise DriverUnavailable('Driver is already booked for these dates')

            customer = db.session.get(User, ctx.user_id)
            if customer is None:
                raise NotFoundError('User not found')
            if data.get('firstName'):
                customer.first_name = data['firstName']
            if data.get('lastName'):
                customer.last_name = data['lastName']
            if data.get('phone'):
                customer.phone_number = data['phone']

            booking = Booking(
                user_id=ctx.user_id,
                tour_id=tour.tour_id if tour else None,
                vehicle_id=vehicle_id or None,
                driver_id=driver_id or None,
                tour_guide_id=tour.tour_guide_id if tour else None,
                start_date=start,
                end_date=end,
                total_price=total_price,
                status='pending',
                number_of_people=people,
                special_requests=data.get('specialRequests'),
            )
            db.session.add(booking)

        logger.info("Booking %s created by user %s", booking.booking_id, ctx.user_id)
        return {"booking_id": booking.booking_id}

    @staticmethod
    def get_user_bookings(user_id):
        bookings = (
            Booking.query.filter_by(user_id=user_id)
            .order_by(Booking.booking_date.desc(), Booking.booking_id.desc())
            .all()
        )
        return [BookingService.summarize(b) for b in bookings]

    @staticmethod
    def get_booking_by_id(booking_id, user_id=None):
        query = Booking.query.filter_by(booking_id=booking_id)
        if user_id is not None:
            query = query.filter_by(user_id=user_id)
        return query.first()

    @staticmethod
    def list_bookings(status=None):
        query = Booking.query
        if status:
            query = query.filter(Booking.status == status)
        bookings = query.order_by(Booking.start_date.desc(), Booking.booking_id.desc()).all()
        return [BookingService.summarize(b) for b in bookings]

    @staticmethod
    def get_assigned_bookings(ctx, status=None):
        """
        Bookings the calling guide or driver is currently assigned to,
        soonest first, with the customer, vehicle and co-worker details
        they need for the trip.
        """
        if ctx.role == 'tourguide':
            query = Booking.query.filter(Booking.tour_guide_id == ctx.user_id)
        elif ctx.role == 'driver':
            query = Booking.query.filter(Booking.driver_id == ctx.user_id)
        else:
            raise AuthorizationError('Only tour guides and drivers have assignments')
        if status:
            query = query.filter(Booking.status == status)

        results = []
        for booking in query.order_by(Booking.start_date, Booking.booking_id).all():
            data = BookingService.summarize(booking)
            data["duration_days"] = booking.tour.duration_days if booking.tour else None
            data["customer"] = _person(booking.user)
            data["vehicle"] = booking.vehicle.to_dict() if booking.vehicle else None
            data["tour_guide"] = _person(booking.tourguide.user) if booking.tourguide else None
            data["driver"] = _person(booking.driver.user) if booking.driver else None
            results.append(data)
        return results

    @staticmethod
    def summarize(booking):
        data = booking.to_dict()
        data["tour_name"] = booking.tour.name if booking.tour else None
        data["destination"] = booking.tour.destination if booking.tour else None
        data["customer_name"] = booking.user.full_name if booking.user else None
        data["payment_status"] = booking.payment.status if booking.payment else None
        data["refund_request"] = booking.payment.refund_request if booking.payment else None
        return data

    @staticmethod
    def get_booking_detail(ctx, booking_id):
        """Booking with tour, vehicle, people and payment, for participants and staff"""
        booking = db.session.get(Booking, booking_id)
        if not booking:
            raise NotFoundError('Booking not found')
        if ctx.role not in STAFF_VIEWERS and booking.participant_role(ctx.user_id) is None:
            raise AuthorizationError('Not allowed to view this booking')

        data = BookingService.summarize(booking)
        tour = booking.tour
        data["tour"] = {
            "tour_id": tour.tour_id,
            "name": tour.name,
            "destination": tour.destination,
            "duration_days": tour.duration_days,
            "price": to_float(tour.price),
        } if tour else None
        data["vehicle"] = booking.vehicle.to_dict() if booking.vehicle else None
        data["customer"] = _person(booking.user)
        data["tour_guide"] = _person(booking.tourguide.user) if booking.tourguide else None
        data["driver"] = _person(booking.driver.user) if booking.driver else None
        data["payment"] = booking.payment.to_dict() if booking.payment else None
        return data

    @staticmethod
    def start_tour(ctx, booking_id):
        """Assigned guide moves a confirmed booking to in-progress"""
        with transaction():
            booking = get_for_update(Booking, booking_id)
            if not booking:
                raise NotFoundError('Booking not found')
            if ctx.role != 'tourguide' or booking.tour_guide_id != ctx.user_id:
                raise AuthorizationError('Only the assigned tour guide can start this tour')
            if booking.status != 'confirmed':
                raise ConflictError(f'Cannot start a {booking.status} booking')
            booking.status = 'in-progress'
        return booking

    @staticmethod
    def end_tour(ctx, booking_id):
        """Assigned guide moves an in-progress booking to completed"""
        with transaction():
            booking = get_for_update(Booking, booking_id)
            if not booking:
                raise NotFoundError('Booking not found')
            if ctx.role != 'tourguide' or booking.tour_guide_id != ctx.user_id:
                raise AuthorizationError('Only the assigned tour guide can end this tour')
            if booking.status != 'in-progress':
                raise ConflictError(f'Cannot end a {booking.status} booking')
            booking.status = 'completed'
        return booking

    @staticmethod
    def check_assignment(ctx, booking_id):
        """
        Tell a guide or driver whether they are still on a booking.

        Someone who was replaced through a change request gets
        ``wasReplaced`` and the replacement details; someone who was never
        on the booking is refused.
        """
        booking = db.session.get(Booking, booking_id)
        if not booking:
            raise NotFoundError('Booking not found')

        if ctx.role == 'tourguide':
            is_assigned = booking.tour_guide_id == ctx.user_id
            current_col, new_col = ChangeRequest.current_tour_guide_id, ChangeRequest.new_tour_guide_id
        elif ctx.role == 'driver':
            is_assigned = booking.driver_id == ctx.user_id
            current_col, new_col = ChangeRequest.current_driver_id, ChangeRequest.new_driver_id
        else:
            raise AuthorizationError('Only tour guides and drivers can check assignments')

        replacement = None
        if not is_assigned:
            replacement = (
                ChangeRequest.query
                .filter(
                    ChangeRequest.booking_id == booking_id,
                    ChangeRequest.status == 'completed',
                    current_col == ctx.user_id,
                    new_col.isnot(None),
                )
                .order_by(ChangeRequest.processed_at.desc(), ChangeRequest.request_id.desc())
                .first()
            )
            if replacement is None:
                raise AuthorizationError('You are not assigned to this booking')

        replacement_info = None
        if replacement is not None:
            new_id = replacement.new_tour_guide_id if ctx.role == 'tourguide' else replacement.new_driver_id
            new_user = db.session.get(User, new_id)
            replacement_info = {
                "request_id": replacement.request_id,
                "reason": replacement.reason,
                "processed_at": isoformat(replacement.processed_at),
                "new_user_id": new_id,
                "new_name": new_user.full_name if new_user else None,
            }

        return {
            "isAssigned": is_assigned,
            "wasReplaced": replacement is not None,
            "replacementInfo": replacement_info,
            "bookingStatus": booking.status,
        }
