"""
Catalog (tours, vehicles, drivers, guides) and app wiring tests
"""
from datetime import date, timedelta

from tourbook.extensions import db
from tourbook.models import Promotion, Vehicle


class TestTours:

    def test_list_tours_with_promotion(self, client, tour):
        db.session.add(Promotion(tour_id=tour.tour_id, dis=20, date=date.today() + timedelta(days=10)))
        db.session.commit()

        response = client.get('/api/tours')

        assert response.status_code == 200
        [data] = response.get_json()
        assert data['discount'] == 20.0
        assert data['price'] == 1000.0
        assert data['discounted_price'] == 800.0
        assert data['image_url'] == '/images/galle.jpg'

    def test_expired_promotion_ignored(self, client, tour):
        db.session.add(Promotion(tour_id=tour.tour_id, dis=50, date=date.today() - timedelta(days=1)))
        db.session.commit()

        data = client.get(f'/api/tours/{tour.tour_id}').get_json()

        assert data['discount'] == 0.0
        assert data['discounted_price'] == 1000.0

    def test_missing_image_uses_default(self, client, app, tour):
        tour.image_url = None
        db.session.commit()

        data = client.get(f'/api/tours/{tour.tour_id}').get_json()

        assert data['image_url'] == app.config['DEFAULT_TOUR_IMAGE']

    def test_unknown_tour(self, client):
        response = client.get('/api/tours/404')
        assert response.status_code == 404
        assert response.get_json()['code'] == 'NOT_FOUND'


class TestVehicles:

    def test_only_available_vehicles_listed(self, client, vehicle):
        db.session.add(Vehicle(make='Nissan', model='Caravan', status='in maintenance'))
        db.session.commit()

        response = client.get('/api/vehicles')

        assert [v['vehicle_id'] for v in response.get_json()] == [vehicle.vehicle_id]

    def test_get_vehicle(self, client, vehicle):
        data = client.get(f'/api/vehicles/{vehicle.vehicle_id}').get_json()
        assert data['daily_rate'] == 80.0


class TestStaffListings:

    def test_drivers_filtered_by_dates(self, client, confirmed_booking, driver, driver2):
        everyone = client.get('/api/drivers').get_json()['drivers']
        assert {d['driver_id'] for d in everyone} == {driver.user_id, driver2.user_id}

        free = client.get('/api/drivers?startDate=2030-06-02&endDate=2030-06-03').get_json()['drivers']
        assert [d['driver_id'] for d in free] == [driver2.user_id]

        later = client.get('/api/drivers?startDate=2030-07-01&endDate=2030-07-03').get_json()['drivers']
        assert len(later) == 2

    def test_bad_date_filter(self, client):
        assert client.get('/api/drivers?startDate=soon&endDate=later').status_code == 400

    def test_tourguides_for_hr(self, client, hr_employee, confirmed_booking, guide, guide2, headers_for):
        response = client.get('/api/employee/tourguides?startDate=2030-06-01&endDate=2030-06-02',
                              headers=headers_for(hr_employee))

        assert response.status_code == 200
        assert [g['tour_guide_id'] for g in response.get_json()['tourguides']] == [guide2.user_id]


class TestAppWiring:

    def test_health(self, client):
        response = client.get('/health')
        assert response.status_code == 200
        assert response.get_json()['status'] == 'healthy'

    def test_unknown_route_is_json(self, client):
        response = client.get('/api/nope')
        assert response.status_code == 404
        assert 'error' in response.get_json()

    def test_json_strings_are_escaped(self, client, customer, confirmed_booking, headers_for):
        response = client.post('/api/change-requests', headers=headers_for(customer), json={
            'bookingId': confirmed_booking.booking_id,
            'requestType': 'driver',
            'reason': '<script>alert(1)</script>',
        })

        assert response.status_code == 201
        assert response.get_json()['request']['reason'] == '&lt;script&gt;alert(1)&lt;/script&gt;'
