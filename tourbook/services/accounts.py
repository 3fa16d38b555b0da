"""
Role façades: what each kind of user may do.

Guests sign up; customers, admins, employees, guides and drivers log in
through their own façade which refuses credentials of another role.
"""
import logging
import re
import secrets
import string
from datetime import date

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from tourbook.database import get_for_update, transaction
from tourbook.errors import (
    AuthorizationError, ConflictError, DriverUnavailable, GuideUnavailable,
    NotFoundError, PayloadTooLarge, ValidationError,
)
from tourbook.extensions import db
from tourbook.models import (
    Admin as AdminRecord, Booking, Customer as CustomerRecord, Driver as DriverRecord,
    Employee as EmployeeRecord, STAFF_ROLES, TourGuide as TourGuideRecord, User,
)
from tourbook.services.auth_service import AuthService, hash_password
from tourbook.services.availability import is_driver_available, is_guide_available
from tourbook.utils import (
    coerce_id, decoded_size, is_strong_password, parse_date, require_fields, require_string,
    split_name, validate_email,
)

logger = logging.getLogger(__name__)

REGISTRABLE_ROLES = STAFF_ROLES
HR_MARKERS = ('hr', 'human resources')
MINIMUM_AGE = 18
DUPLICATE_ACCOUNT = 'Username or email already exists'


def _age_on(birth_date, today):
    years = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        years -= 1
    return years


def _generate_username(name, email):
    base = re.sub(r'[^a-z0-9]+', '.', name.lower() if isinstance(name, str) else '').strip('.')
    if not base:
        base = re.sub(r'[^a-z0-9]+', '.', (email or '').split('@')[0].lower()).strip('.')
    return f'{base or "user"}.{secrets.token_hex(2)}'


def _generate_temp_password():
    """12 characters that always pass is_strong_password"""
    specials = '!@#$%^&*'
    required = [
        secrets.choice(string.ascii_uppercase),
        secrets.choice(string.ascii_lowercase),
        secrets.choice(string.digits),
        secrets.choice(specials),
    ]
    pool = string.ascii_letters + string.digits + specials
    chars = required + [secrets.choice(pool) for _ in range(8)]
    secrets.SystemRandom().shuffle(chars)
    return ''.join(chars)


def _login_as(role, identifier, password):
    result = AuthService.login(identifier, password)
    if result is None or result.role != role:
        return None
    return result


class Guest:
    """Unauthenticated visitor"""

    @staticmethod
    def guest_signup(data):
        """
        Register a customer account.

        Returns:
            dict: {user_id, username, email, role}

        Raises:
            ValidationError: missing fields, bad email, weak password, under 18
            ConflictError: username or email taken (code DUPLICATE)
        """
        require_fields(data, ('username', 'email', 'password'))
        username = require_string(data, 'username')
        email = require_string(data, 'email')
        password = data['password']
        if not isinstance(password, str):
            raise ValidationError('password must be a string')
        if not validate_email(email):
            raise ValidationError('Invalid email format')
        if not is_strong_password(password):
            raise ValidationError(
                'Password must be at least 8 characters and include upper and lower case '
                'letters, a number and a special character'
            )

        birth_date = None
        if data.get('DOB'):
            birth_date = parse_date(data['DOB'], 'DOB')
            if _age_on(birth_date, date.today()) < MINIMUM_AGE:
                raise ValidationError('You must be at least 18 years old to register')

        first_name = data.get('first_name') or data.get('firstName')
        last_name = data.get('last_name') or data.get('lastName')
        if not first_name and data.get('name'):
            first_name, last_name = split_name(require_string(data, 'name'))

        with transaction(duplicate_message=DUPLICATE_ACCOUNT):
            AuthService.ensure_unique_username_email(username, email)
            user = User(
                username=username,
                email=email,
                password_hash=hash_password(password),
                first_name=first_name,
                last_name=last_name,
                phone_number=data.get('phoneNo'),
                address=data.get('address'),
                role='customer',
            )
            db.session.add(user)

        # The customers row is a convenience; the account is usable without it
        try:
            db.session.add(CustomerRecord(customer_id=user.user_id, date_of_birth=birth_date))
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.warning("Could not create customers row for user %s", user.user_id, exc_info=True)

        return {
            "user_id": user.user_id,
            "username": user.username,
            "email": user.email,
            "role": user.role,
        }

    @staticmethod
    def guest_login(identifier, password):
        return AuthService.login(identifier, password)


class Customer:
    """Customer façade; ``ctx`` is the logged-in customer"""

    def __init__(self, ctx):
        self.ctx = ctx

    @staticmethod
    def login(identifier, password):
        return _login_as('customer', identifier, password)

    def request_guide_change(self, booking_id, reason):
        """Guides are never swapped directly; this files a change request"""
        from tourbook.services.change_request_service import ChangeRequestService
        return ChangeRequestService.create_request(self.ctx, booking_id, 'tour_guide', reason)

    def request_driver_change(self, booking_id, reason):
        from tourbook.services.change_request_service import ChangeRequestService
        return ChangeRequestService.create_request(self.ctx, booking_id, 'driver', reason)


class Employee:

    @staticmethod
    def login(identifier, password):
        return _login_as('employee', identifier, password)

    @staticmethod
    def is_hr(user_id):
        """True for employees whose department or position is HR"""
        record = db.session.get(EmployeeRecord, user_id)
        if record is None or record.user is None or record.user.role != 'employee':
            return False
        values = ((record.department or '').strip().lower(), (record.position or '').strip().lower())
        return any(
            value == marker or value.startswith(marker + ' ')
            for value in values for marker in HR_MARKERS
        )

    @staticmethod
    def assign_tour_guide(ctx, booking_id, guide_id):
        """
        Put a guide on a booking that has none.

        A booking that already has a guide must go through a change
        request. The guide row is locked before the overlap check.
        """
        if ctx.role != 'admin' and not (ctx.role == 'employee' and Employee.is_hr(ctx.user_id)):
            raise AuthorizationError('HR access required')
        booking_id = coerce_id(booking_id, 'bookingId')
        guide_id = coerce_id(guide_id, 'tourGuideId')
        if not booking_id or not guide_id:
            raise ValidationError('bookingId and tourGuideId are required')

        with transaction():
            booking = get_for_update(Booking, booking_id)
            if not booking:
                raise NotFoundError('Booking not found')
            if booking.status in ('completed', 'cancelled'):
                raise ConflictError(f'Cannot assign a guide to a {booking.status} booking')
            if booking.tour_guide_id is not None and booking.tour_guide_id != guide_id:
                raise ConflictError('Booking already has a tour guide; submit a change request instead')
            guide = get_for_update(TourGuideRecord, guide_id)
            if not guide or guide.user.role != 'tourguide':
                raise NotFoundError('Tour guide not found')
            if not is_guide_available(guide_id, booking.start_date, booking.end_date,
                                      exclude_booking_id=booking.booking_id):
                raise GuideUnavailable('Tour guide is already booked for these dates')
            booking.tour_guide_id = guide_id
        return booking


class TourGuide:

    @staticmethod
    def login(identifier, password):
        return _login_as('tourguide', identifier, password)


class Driver:

    @staticmethod
    def login(identifier, password):
        return _login_as('driver', identifier, password)


class Admin:

    @staticmethod
    def login(identifier, password):
        return _login_as('admin', identifier, password)

    @staticmethod
    def ensure_admin(ctx):
        user = db.session.get(User, ctx.user_id)
        if user is None or user.role != 'admin':
            raise AuthorizationError('Admin access required')
        return user

    @staticmethod
    def register_employee(ctx, data):
        """
        Create a staff account and its role records in one transaction.

        admin     -> users + admins
        employee  -> users + employees
        tourguide -> users + employees + tourguides
        driver    -> users + employees + drivers

        Username and password are generated when omitted; the generated
        password is returned once as ``temp_password``.

        Raises:
            AuthorizationError: caller is not an admin (checked first)
            ValidationError: missing or malformed fields
            PayloadTooLarge: driver picture over MAX_DRIVER_PICTURE_BYTES
            ConflictError: username or email taken (code DUPLICATE)
        """
        Admin.ensure_admin(ctx)

        require_fields(data, ('email', 'role'))
        role = data['role']
        if role not in REGISTRABLE_ROLES:
            raise ValidationError(f'Invalid role: {role}')
        email = require_string(data, 'email')
        if not validate_email(email):
            raise ValidationError('Invalid email format')

        if data.get('firstName') or data.get('first_name'):
            first_name = data.get('firstName') or data.get('first_name')
            last_name = data.get('lastName') or data.get('last_name')
        else:
            require_fields(data, ('name',))
            first_name, last_name = split_name(require_string(data, 'name'))

        username = None
        if data.get('username') not in (None, ''):
            username = require_string(data, 'username')
        username = username or _generate_username(data.get('name'), email)
        temp_password = None
        password = data.get('password')
        if not password:
            password = temp_password = _generate_temp_password()
        elif not isinstance(password, str):
            raise ValidationError('password must be a string')
        if not is_strong_password(password):
            raise ValidationError('Weak password')

        if role == 'admin':
            require_fields(data, ('adminLevel',))
            try:
                admin_level = int(data['adminLevel'])
            except (TypeError, ValueError):
                raise ValidationError('adminLevel must be a number')
        if role in ('tourguide', 'driver'):
            require_fields(data, ('licenseNo',))
        if role == 'tourguide':
            experience = data.get('experience', data.get('experienceYears', 0))
            try:
                experience = int(experience or 0)
            except (TypeError, ValueError):
                raise ValidationError('Tour guide experience (years) must be a number')
        picture = data.get('picture') if role == 'driver' else None
        if picture:
            limit = current_app.config['MAX_DRIVER_PICTURE_BYTES']
            if decoded_size(picture) > limit:
                raise PayloadTooLarge(f'Picture exceeds {limit} bytes')

        with transaction(duplicate_message=DUPLICATE_ACCOUNT):
            AuthService.ensure_unique_username_email(username, email)
            user = User(
                username=username,
                email=email,
                password_hash=hash_password(password),
                first_name=first_name,
                last_name=last_name,
                phone_number=data.get('phoneNo'),
                address=data.get('address'),
                role=role,
            )
            db.session.add(user)
            db.session.flush()

            if role == 'admin':
                db.session.add(AdminRecord(admin_id=user.user_id, admin_level=admin_level))
                position = 'Administrator'
            elif role == 'employee':
                position = data.get('position') or 'Employee'
                db.session.add(EmployeeRecord(
                    employee_id=user.user_id,
                    position=position,
                    department=data.get('department') or 'General',
                ))
            elif role == 'tourguide':
                position = 'Tour Guide'
                db.session.add(EmployeeRecord(employee_id=user.user_id, position=position, department='Guides'))
                db.session.add(TourGuideRecord(
                    tour_guide_id=user.user_id,
                    license_number=data['licenseNo'],
                    experience_years=experience,
                    specialization=data.get('specialization'),
                ))
            else:
                position = 'Driver'
                db.session.add(EmployeeRecord(employee_id=user.user_id, position=position, department='Transport'))
                db.session.add(DriverRecord(
                    driver_id=user.user_id,
                    license_number=data['licenseNo'],
                    vehicle_type=data.get('vehicleType'),
                    picture=picture,
                ))

        logger.info("Admin %s registered %s %s", ctx.user_id, role, user.user_id)
        created = {
            "user_id": user.user_id,
            "username": user.username,
            "email": user.email,
            "role": role,
            "position": position,
        }
        if temp_password:
            created["temp_password"] = temp_password
        return created

    @staticmethod
    def list_staff(ctx, role=None):
        Admin.ensure_admin(ctx)
        query = User.query.join(EmployeeRecord, EmployeeRecord.employee_id == User.user_id)
        if role:
            query = query.filter(User.role == role)
        staff = []
        for user in query.order_by(User.user_id.desc()).all():
            staff.append({
                "id": user.user_id,
                "name": user.full_name,
                "email": user.email,
                "phone": user.phone_number or '',
                "role": user.role,
                "position": user.employee.position,
                "department": user.employee.department,
            })
        return staff

    @staticmethod
    def reset_staff_password(ctx, data):
        """
        Set a new password on a staff account, found by ``userId`` or
        ``username``. A temporary password is generated when
        ``newPassword`` is omitted and returned once.

        Customers change their own password; they are not reset here.
        """
        Admin.ensure_admin(ctx)
        user_id = coerce_id(data.get('userId'), 'userId')
        username = require_string(data, 'username') if data.get('username') else None
        if not user_id and not username:
            raise ValidationError('userId or username is required')

        temp_password = None
        password = data.get('newPassword')
        if not password:
            password = temp_password = _generate_temp_password()
        elif not isinstance(password, str) or not is_strong_password(password):
            raise ValidationError('Weak password')

        with transaction():
            if user_id:
                user = get_for_update(User, user_id)
            else:
                user = User.query.filter_by(username=username).with_for_update().first()
            if user is None or user.role not in STAFF_ROLES:
                raise NotFoundError('Employee not found')
            user.password_hash = hash_password(password)

        logger.info("Admin %s reset the password of user %s", ctx.user_id, user.user_id)
        result = {"user_id": user.user_id, "username": user.username, "role": user.role}
        if temp_password:
            result["temp_password"] = temp_password
        return result

    @staticmethod
    def remove_staff(ctx, user_id):
        """Delete a guide, driver or employee account and its role rows"""
        Admin.ensure_admin(ctx)
        with transaction():
            user = db.session.get(User, user_id)
            if not user or user.employee is None or user.role == 'admin':
                raise NotFoundError('Employee not found')
            Booking.query.filter(Booking.driver_id == user_id).update(
                {Booking.driver_id: None}, synchronize_session=False)
            Booking.query.filter(Booking.tour_guide_id == user_id).update(
                {Booking.tour_guide_id: None}, synchronize_session=False)
            for record in (user.driver, user.tourguide, user.employee):
                if record is not None:
                    db.session.delete(record)
            db.session.delete(user)

    @staticmethod
    def assign_driver(ctx, booking_id, driver_id):
        """
        Put a driver on a booking that has none.

        Replacing an assigned driver goes through a change request.
        """
        Admin.ensure_admin(ctx)
        booking_id = coerce_id(booking_id, 'bookingId')
        driver_id = coerce_id(driver_id, 'driverId')
        if not booking_id or not driver_id:
            raise ValidationError('bookingId and driverId are required')
        with transaction():
            booking = get_for_update(Booking, booking_id)
            if not booking:
                raise NotFoundError('Booking not found')
            if booking.status in ('completed', 'cancelled'):
                raise ConflictError(f'Cannot assign a driver to a {booking.status} booking')
            if booking.driver_id is not None and booking.driver_id != driver_id:
                raise ConflictError('Booking already has a driver; submit a change request instead')
            driver = get_for_update(DriverRecord, driver_id)
            if not driver or driver.user.role != 'driver':
                raise NotFoundError('Driver not found')
            if not is_driver_available(driver_id, booking.start_date, booking.end_date,
                                       exclude_booking_id=booking.booking_id):
                raise DriverUnavailable('Driver is already booked for these dates')
            booking.driver_id = driver_id
        return booking
