"""
Live location tracking tests
"""
from datetime import timedelta

from tourbook.extensions import db
from tourbook.models import LocationPing
from tourbook.models.base import utcnow
from tourbook.services.location_service import LocationService


def ping(client, headers, booking_id, lat=6.9271, lng=79.8612, **extra):
    body = {'bookingId': booking_id, 'latitude': lat, 'longitude': lng}
    body.update(extra)
    return client.post('/api/location/update', headers=headers, json=body)


class TestUpdateLocation:

    def test_participants_share_location(self, client, customer, driver, confirmed_booking, headers_for):
        response = ping(client, headers_for(driver), confirmed_booking.booking_id, speed=42.5)

        assert response.status_code == 201
        location = response.get_json()['location']
        assert location['user_type'] == 'driver'
        assert location['speed'] == 42.5

        assert ping(client, headers_for(customer), confirmed_booking.booking_id).status_code == 201
        assert LocationPing.query.count() == 2

    def test_coordinates_validated(self, client, driver, confirmed_booking, headers_for):
        response = ping(client, headers_for(driver), confirmed_booking.booking_id, lat=95)
        assert response.status_code == 400
        assert LocationPing.query.count() == 0

    def test_outsider_rejected(self, client, driver2, confirmed_booking, headers_for):
        response = ping(client, headers_for(driver2), confirmed_booking.booking_id)
        assert response.status_code == 403

    def test_staff_do_not_ping(self, client, admin_user, confirmed_booking, headers_for):
        response = ping(client, headers_for(admin_user), confirmed_booking.booking_id)
        assert response.status_code == 403

    def test_replaced_driver_loses_access(self, client, driver, driver2, confirmed_booking, headers_for):
        confirmed_booking.driver_id = driver2.user_id
        db.session.commit()

        assert ping(client, headers_for(driver), confirmed_booking.booking_id).status_code == 403
        assert client.get(f'/api/location/{confirmed_booking.booking_id}',
                          headers=headers_for(driver)).status_code == 403
        assert ping(client, headers_for(driver2), confirmed_booking.booking_id).status_code == 201


class TestReadLocations:

    def test_latest_location_per_participant(self, client, customer, guide, driver, confirmed_booking,
                                             headers_for):
        ping(client, headers_for(driver), confirmed_booking.booking_id, lat=7.0)
        ping(client, headers_for(driver), confirmed_booking.booking_id, lat=7.5)

        response = client.get(f'/api/location/{confirmed_booking.booking_id}', headers=headers_for(customer))

        assert response.status_code == 200
        participants = {p['user_type']: p for p in response.get_json()['participants']}
        assert set(participants) == {'customer', 'tourguide', 'driver'}
        assert participants['driver']['location']['latitude'] == 7.5
        assert participants['tourguide']['location'] is None

    def test_history_newest_first(self, client, guide, driver, confirmed_booking, headers_for):
        for lat in (7.0, 7.1, 7.2):
            ping(client, headers_for(driver), confirmed_booking.booking_id, lat=lat)

        response = client.get(f'/api/location/history/{confirmed_booking.booking_id}/{driver.user_id}?limit=2',
                              headers=headers_for(guide))

        assert response.status_code == 200
        assert [p['latitude'] for p in response.get_json()['history']] == [7.2, 7.1]

    def test_staff_can_view(self, client, hr_employee, confirmed_booking, headers_for):
        response = client.get(f'/api/location/{confirmed_booking.booking_id}', headers=headers_for(hr_employee))
        assert response.status_code == 200


class TestCleanup:

    def test_old_pings_removed(self, app, customer, confirmed_booking):
        db.session.add_all([
            LocationPing(booking_id=confirmed_booking.booking_id, user_id=customer.user_id, user_type='customer',
                         latitude=1, longitude=1, timestamp=utcnow() - timedelta(days=31)),
            LocationPing(booking_id=confirmed_booking.booking_id, user_id=customer.user_id, user_type='customer',
                         latitude=2, longitude=2, timestamp=utcnow() - timedelta(days=1)),
        ])
        db.session.commit()

        assert LocationService.cleanup_old_locations(30) == 1
        assert [p.latitude for p in LocationPing.query.all()] == [2]

    def test_purge_cli_command(self, app, customer, confirmed_booking):
        db.session.add(LocationPing(booking_id=confirmed_booking.booking_id, user_id=customer.user_id,
                                    user_type='customer', latitude=1, longitude=1,
                                    timestamp=utcnow() - timedelta(days=60)))
        db.session.commit()

        result = app.test_cli_runner().invoke(args=['purge-locations', '--days', '30'])

        assert result.exit_code == 0
        assert 'Deleted 1 location pings' in result.output
        assert LocationPing.query.count() == 0
