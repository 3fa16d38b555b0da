"""
Database models package
"""
from .user import User, Customer, Employee, TourGuide, Driver, Admin, ROLES, STAFF_ROLES
from .tour import Tour, Promotion, ItineraryDay
from .vehicle import Vehicle
from .booking import Booking, Payment, BOOKING_STATUSES, BLOCKING_STATUSES
from .itinerary import (
    CustomItineraryDay, ItineraryRequest, EDITABLE_DAY_FIELDS, ITINERARY_REQUEST_TYPES
)
from .change_request import ChangeRequest, REQUEST_TYPES, REQUEST_STATUSES
from .rating import Rating, SUBJECT_TYPES
from .notification import Notification
from .location import LocationPing

__all__ = [
    'User', 'Customer', 'Employee', 'TourGuide', 'Driver', 'Admin',
    'Tour', 'Promotion', 'ItineraryDay',
    'Vehicle',
    'Booking', 'Payment',
    'CustomItineraryDay', 'ItineraryRequest',
    'ChangeRequest',
    'Rating',
    'Notification',
    'LocationPing',
    'ROLES', 'STAFF_ROLES', 'BOOKING_STATUSES', 'BLOCKING_STATUSES',
    'EDITABLE_DAY_FIELDS', 'ITINERARY_REQUEST_TYPES',
    'REQUEST_TYPES', 'REQUEST_STATUSES', 'SUBJECT_TYPES',
]
