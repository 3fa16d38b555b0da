"""
Booking creation, lookup and tour lifecycle tests
"""
from tourbook.extensions import db
from tourbook.models import Booking, User

from .conftest import END, START


def booking_body(**overrides):
    body = {
        'startDate': START.isoformat(),
        'endDate': END.isoformat(),
        'totalPrice': 1200,
        'peopleCount': 2,
    }
    body.update(overrides)
    return body


class TestCreateBooking:

    def test_create_tour_booking(self, client, customer, tour, guide, headers_for):
        response = client.post('/api/bookings', headers=headers_for(customer),
                               json=booking_body(tourId=tour.tour_id, specialRequests='Vegetarian meals'))

        assert response.status_code == 201
        booking = db.session.get(Booking, response.get_json()['booking_id'])
        assert booking.status == 'pending'
        assert booking.user_id == customer.user_id
        assert booking.tour_guide_id == guide.user_id
        assert booking.number_of_people == 2
        assert booking.special_requests == 'Vegetarian meals'

    def test_create_patches_customer_contact(self, client, customer, tour, headers_for):
        client.post('/api/bookings', headers=headers_for(customer),
                    json=booking_body(tourId=tour.tour_id, firstName='Alicia', phone='0771234567'))

        user = db.session.get(User, customer.user_id)
        assert user.first_name == 'Alicia'
        assert user.phone_number == '0771234567'

    def test_start_not_before_end_rejected(self, client, customer, tour, headers_for):
        for start, end in ((END, START), (START, START)):
            response = client.post('/api/bookings', headers=headers_for(customer),
                                   json=booking_body(tourId=tour.tour_id, startDate=start.isoformat(),
                                                     endDate=end.isoformat()))
            assert response.status_code == 400
            assert response.get_json()['code'] == 'INVALID_DATE_RANGE'
        assert Booking.query.count() == 0

    def test_missing_fields_rejected(self, client, customer, tour, headers_for):
        response = client.post('/api/bookings', headers=headers_for(customer),
                               json={'tourId': tour.tour_id, 'startDate': START.isoformat()})
        assert response.status_code == 400

    def test_requires_tour_or_vehicle(self, client, customer, headers_for):
        response = client.post('/api/bookings', headers=headers_for(customer), json=booking_body())
        assert response.status_code == 400

    def test_unavailable_tour_rejected(self, client, customer, tour, headers_for):
        tour.availability = False
        db.session.commit()

        response = client.post('/api/bookings', headers=headers_for(customer),
                               json=booking_body(tourId=tour.tour_id))

        assert response.status_code == 409
        assert response.get_json()['code'] == 'TOUR_UNAVAILABLE'
        assert Booking.query.count() == 0

    def test_unknown_tour(self, client, customer, headers_for):
        response = client.post('/api/bookings', headers=headers_for(customer), json=booking_body(tourId=999))
        assert response.status_code == 404

    def test_vehicle_status_checked_case_insensitively(self, client, customer, vehicle, headers_for):
        vehicle.status = 'Maintenance'
        db.session.commit()
        response = client.post('/api/bookings', headers=headers_for(customer),
                               json=booking_body(vehicleId=vehicle.vehicle_id))
        assert response.status_code == 409
        assert response.get_json()['code'] == 'VEHICLE_UNAVAILABLE'

        vehicle.status = 'AVAILABLE'
        db.session.commit()
        response = client.post('/api/bookings', headers=headers_for(customer),
                               json=booking_body(vehicleId=vehicle.vehicle_id))
        assert response.status_code == 201

    def test_only_customers_book(self, client, guide, tour, headers_for):
        response = client.post('/api/bookings', headers=headers_for(guide), json=booking_body(tourId=tour.tour_id))
        assert response.status_code == 403

    def test_requires_login(self, client, tour):
        response = client.post('/api/bookings', json=booking_body(tourId=tour.tour_id))
        assert response.status_code == 401


class TestDriverOverlap:

    def test_overlapping_bookings_for_same_driver(self, client, customer, other_customer, vehicle, driver,
                                                  headers_for):
        first = client.post('/api/bookings', headers=headers_for(customer),
                            json=booking_body(vehicleId=vehicle.vehicle_id, driverId=driver.user_id))
        second = client.post('/api/bookings', headers=headers_for(other_customer),
                             json=booking_body(vehicleId=vehicle.vehicle_id, driverId=driver.user_id,
                                               startDate='2030-06-03', endDate='2030-06-08'))

        assert first.status_code == 201
        assert second.status_code == 409
        assert second.get_json()['code'] == 'DRIVER_UNAVAILABLE'
        assert Booking.query.filter_by(driver_id=driver.user_id).count() == 1

    def test_touching_ranges_overlap(self, client, customer, booking_factory, vehicle, driver, headers_for):
        booking_factory(driver_id=driver.user_id, status='confirmed')

        response = client.post('/api/bookings', headers=headers_for(customer),
                               json=booking_body(vehicleId=vehicle.vehicle_id, driverId=driver.user_id,
                                                 startDate=END.isoformat(), endDate='2030-06-09'))

        assert response.status_code == 409

    def test_disjoint_ranges_allowed(self, client, customer, booking_factory, vehicle, driver, headers_for):
        booking_factory(driver_id=driver.user_id, status='confirmed')

        response = client.post('/api/bookings', headers=headers_for(customer),
                               json=booking_body(vehicleId=vehicle.vehicle_id, driverId=driver.user_id,
                                                 startDate='2030-06-06', endDate='2030-06-09'))

        assert response.status_code == 201

    def test_cancelled_and_completed_bookings_do_not_block(self, client, customer, booking_factory, vehicle,
                                                           driver, headers_for):
        booking_factory(driver_id=driver.user_id, status='cancelled')
        booking_factory(driver_id=driver.user_id, status='completed')

        response = client.post('/api/bookings', headers=headers_for(customer),
                               json=booking_body(vehicleId=vehicle.vehicle_id, driverId=driver.user_id))

        assert response.status_code == 201

    def test_non_driver_id_rejected(self, client, customer, vehicle, guide, headers_for):
        response = client.post('/api/bookings', headers=headers_for(customer),
                               json=booking_body(vehicleId=vehicle.vehicle_id, driverId=guide.user_id))
        assert response.status_code == 404


class TestBookingLookup:

    def test_list_own_bookings(self, client, customer, other_customer, booking_factory, headers_for):
        mine = booking_factory()
        booking_factory(user_id=other_customer.user_id)

        response = client.get('/api/bookings', headers=headers_for(customer))

        assert response.status_code == 200
        assert [b['booking_id'] for b in response.get_json()['bookings']] == [mine.booking_id]

    def test_detail_for_participants_only(self, client, confirmed_booking, customer, other_customer, driver,
                                          headers_for):
        url = f'/api/bookings/{confirmed_booking.booking_id}'

        owner = client.get(url, headers=headers_for(customer))
        assert owner.status_code == 200
        data = owner.get_json()
        assert data['tour']['name'] == 'Coastal Escape'
        assert data['driver']['user_id'] == driver.user_id

        assert client.get(url, headers=headers_for(driver)).status_code == 200
        assert client.get(url, headers=headers_for(other_customer)).status_code == 403

    def test_detail_not_found(self, client, customer, headers_for):
        assert client.get('/api/bookings/999', headers=headers_for(customer)).status_code == 404


class TestTourLifecycle:

    def test_guide_starts_and_ends_tour(self, client, confirmed_booking, guide, headers_for):
        body = {'bookingId': confirmed_booking.booking_id}

        started = client.post('/api/tour/start', headers=headers_for(guide), json=body)
        assert started.status_code == 200
        assert started.get_json()['booking']['status'] == 'in-progress'

        ended = client.post('/api/tour/end', headers=headers_for(guide), json=body)
        assert ended.status_code == 200
        assert db.session.get(Booking, confirmed_booking.booking_id).status == 'completed'

    def test_other_guide_cannot_start(self, client, confirmed_booking, guide2, headers_for):
        response = client.post('/api/tour/start', headers=headers_for(guide2),
                               json={'bookingId': confirmed_booking.booking_id})
        assert response.status_code == 403

    def test_cannot_end_before_start(self, client, confirmed_booking, guide, headers_for):
        response = client.post('/api/tour/end', headers=headers_for(guide),
                               json={'bookingId': confirmed_booking.booking_id})
        assert response.status_code == 409


class TestCheckAssignment:

    def test_assigned_driver(self, client, confirmed_booking, driver, headers_for):
        response = client.get(f'/api/bookings/check-assignment?booking_id={confirmed_booking.booking_id}',
                              headers=headers_for(driver))

        assert response.status_code == 200
        assert response.get_json() == {
            'isAssigned': True,
            'wasReplaced': False,
            'replacementInfo': None,
            'bookingStatus': 'confirmed',
        }

    def test_never_assigned_is_forbidden(self, client, confirmed_booking, driver2, headers_for):
        response = client.get(f'/api/bookings/check-assignment?booking_id={confirmed_booking.booking_id}',
                              headers=headers_for(driver2))
        assert response.status_code == 403


class TestAssignedBookings:

    def test_guide_and_driver_see_their_trip(self, client, confirmed_booking, guide, driver, headers_for):
        for user in (guide, driver):
            response = client.get('/api/bookings/assigned', headers=headers_for(user))

            assert response.status_code == 200
            bookings = response.get_json()['bookings']
            assert [b['booking_id'] for b in bookings] == [confirmed_booking.booking_id]
            assert bookings[0]['customer']['user_id'] == confirmed_booking.user_id

    def test_unassigned_driver_sees_nothing(self, client, confirmed_booking, driver2, headers_for):
        response = client.get('/api/bookings/assigned', headers=headers_for(driver2))
        assert response.status_code == 200
        assert response.get_json()['bookings'] == []

    def test_status_filter(self, client, confirmed_booking, guide, booking_factory, tour, headers_for):
        booking_factory(tour_id=tour.tour_id, tour_guide_id=guide.user_id, status='completed')

        response = client.get('/api/bookings/assigned?status=confirmed', headers=headers_for(guide))

        assert [b['booking_id'] for b in response.get_json()['bookings']] == [confirmed_booking.booking_id]

    def test_customers_forbidden(self, client, customer, headers_for):
        response = client.get('/api/bookings/assigned', headers=headers_for(customer))
        assert response.status_code == 403
