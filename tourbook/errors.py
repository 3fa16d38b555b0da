"""
Domain exceptions.

Services raise these; the error handlers registered in create_app() turn
them into JSON responses of the form {"error": ..., "code": ...}.
"""


class TourbookError(Exception):
    """Base exception for all domain errors"""

    status_code = 500
    default_code = 'ERROR'

    def __init__(self, message, code=None, details=None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}

    def to_dict(self):
        payload = {'error': self.message, 'code': self.code}
        if self.details:
            payload['details'] = self.details
        return payload


class ValidationError(TourbookError):
    """Missing or malformed input. Raised before any mutation."""
    status_code = 400
    default_code = 'VALIDATION_ERROR'


class InvalidDateRange(ValidationError):
    default_code = 'INVALID_DATE_RANGE'


class AuthenticationError(TourbookError):
    status_code = 401
    default_code = 'UNAUTHENTICATED'


class AuthorizationError(TourbookError):
    """The caller's role does not permit the operation"""
    status_code = 403
    default_code = 'UNAUTHORIZED'


class NotFoundError(TourbookError):
    status_code = 404
    default_code = 'NOT_FOUND'


class ConflictError(TourbookError):
    """Uniqueness or state conflict (duplicate, double payment, overlap)"""
    status_code = 409
    default_code = 'CONFLICT'


class TourUnavailable(ConflictError):
    default_code = 'TOUR_UNAVAILABLE'


class VehicleUnavailable(ConflictError):
    default_code = 'VEHICLE_UNAVAILABLE'


class DriverUnavailable(ConflictError):
    default_code = 'DRIVER_UNAVAILABLE'


class GuideUnavailable(ConflictError):
    default_code = 'GUIDE_UNAVAILABLE'


class PayloadTooLarge(TourbookError):
    status_code = 413
    default_code = 'PAYLOAD_TOO_LARGE'


class DatabaseError(TourbookError):
    """Unexpected storage failure; the surrounding transaction was rolled back"""
    status_code = 500
    default_code = 'DB_ERROR'
