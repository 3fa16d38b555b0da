"""
Pytest configuration and fixtures for the tour booking backend tests
"""
from datetime import date

import pytest

from tourbook import create_app
from tourbook.auth import AuthContext, issue_token
from tourbook.extensions import db
from tourbook.models import (
    Admin, Booking, Customer, Driver, Employee, ItineraryDay, Tour, TourGuide, User, Vehicle,
)
from tourbook.services.auth_service import hash_password

PASSWORD = 'Passw0rd!'
START = date(2030, 6, 1)
END = date(2030, 6, 5)


@pytest.fixture
def app():
    """Application with a fresh in-memory database per test"""
    app = create_app('testing')

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    """Factory for users with their role records"""
    counter = {'n': 0}

    def _make_user(role='customer', username=None, password=PASSWORD, **extra):
        counter['n'] += 1
        username = username or f'{role}{counter["n"]}'
        user = User(
            username=username,
            email=extra.pop('email', f'{username}@example.com'),
            password_hash=hash_password(password),
            first_name=extra.pop('first_name', role.title()),
            last_name=extra.pop('last_name', str(counter['n'])),
            role=role,
        )
        db.session.add(user)
        db.session.flush()
        if role == 'customer':
            db.session.add(Customer(customer_id=user.user_id))
        elif role == 'admin':
            db.session.add(Admin(admin_id=user.user_id, admin_level=1))
        else:
            db.session.add(Employee(
                employee_id=user.user_id,
                position=extra.pop('position', {'tourguide': 'Tour Guide', 'driver': 'Driver'}.get(role, 'Employee')),
                department=extra.pop('department', {'tourguide': 'Guides', 'driver': 'Transport'}.get(role, 'General')),
            ))
            if role == 'tourguide':
                db.session.add(TourGuide(tour_guide_id=user.user_id, license_number='TG-1', experience_years=3))
            elif role == 'driver':
                db.session.add(Driver(driver_id=user.user_id, license_number='DR-1', vehicle_type='Van'))
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def customer(make_user):
    return make_user('customer', username='alice')


@pytest.fixture
def other_customer(make_user):
    return make_user('customer', username='bob')


@pytest.fixture
def admin_user(make_user):
    return make_user('admin', username='root')


@pytest.fixture
def hr_employee(make_user):
    return make_user('employee', username='hanna', position='HR Officer', department='Human Resources')


@pytest.fixture
def plain_employee(make_user):
    return make_user('employee', username='eric', position='Clerk', department='Sales')


@pytest.fixture
def guide(make_user):
    return make_user('tourguide', username='gina')


@pytest.fixture
def guide2(make_user):
    return make_user('tourguide', username='gus')


@pytest.fixture
def driver(make_user):
    return make_user('driver', username='dan')


@pytest.fixture
def driver2(make_user):
    return make_user('driver', username='dora')


@pytest.fixture
def tour(app, guide):
    """Tour with a default guide and three template days stored out of order"""
    tour = Tour(
        name='Coastal Escape',
        description='Five days by the sea',
        destination='Galle',
        duration_days=3,
        price=1000,
        availability=True,
        image_url='galle.jpg',
        tour_guide_id=guide.user_id,
    )
    db.session.add(tour)
    db.session.flush()
    db.session.add_all([
        ItineraryDay(tour_id=tour.tour_id, day_number=3, title='Departure', activities=['Checkout']),
        ItineraryDay(tour_id=tour.tour_id, day_number=1, title='Arrival', activities=['Welcome dinner']),
        ItineraryDay(tour_id=tour.tour_id, day_number=2, title='Beach', activities=['Snorkelling', 'Fort walk']),
    ])
    db.session.commit()
    return tour


@pytest.fixture
def vehicle(app, driver):
    vehicle = Vehicle(
        driver_id=driver.user_id,
        make='Toyota',
        model='HiAce',
        year=2022,
        license_plate='CAB-1234',
        capacity=10,
        daily_rate=80,
        status='available',
    )
    db.session.add(vehicle)
    db.session.commit()
    return vehicle


@pytest.fixture
def booking_factory(app, customer):
    """Insert bookings directly, bypassing the service checks"""
    def _create_booking(**kwargs):
        defaults = {
            'user_id': customer.user_id,
            'start_date': START,
            'end_date': END,
            'total_price': 1000,
            'number_of_people': 2,
            'status': 'pending',
        }
        defaults.update(kwargs)
        booking = Booking(**defaults)
        db.session.add(booking)
        db.session.commit()
        return booking

    return _create_booking


@pytest.fixture
def confirmed_booking(booking_factory, tour, guide, driver, vehicle):
    return booking_factory(
        tour_id=tour.tour_id,
        vehicle_id=vehicle.vehicle_id,
        driver_id=driver.user_id,
        tour_guide_id=guide.user_id,
        status='confirmed',
    )


@pytest.fixture
def headers_for(app):
    """Build auth headers carrying a JWT for ``user``"""
    def _headers_for(user):
        token = issue_token(user.user_id, user.role)
        return {'Authorization': f'Bearer {token}'}

    return _headers_for


@pytest.fixture
def ctx_for():
    def _ctx_for(user):
        return AuthContext(user_id=user.user_id, role=user.role)

    return _ctx_for
