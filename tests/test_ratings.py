"""
Rating tests
"""
from tourbook.extensions import db
from tourbook.models import Driver, Rating, TourGuide
from tourbook.services.rating_service import RatingService


def completed(booking):
    booking.status = 'completed'
    db.session.commit()
    return booking


class TestSubmitRating:

    def test_cannot_rate_unfinished_booking(self, client, customer, confirmed_booking, headers_for):
        response = client.post('/api/ratings/submit', headers=headers_for(customer),
                               json={'booking_id': confirmed_booking.booking_id, 'rating_driver': 5})
        assert response.status_code == 403
        assert Rating.query.count() == 0

    def test_rate_guide_and_driver_updates_averages(self, client, customer, confirmed_booking, guide, driver,
                                                    headers_for):
        completed(confirmed_booking)

        response = client.post('/api/ratings/submit', headers=headers_for(customer), json={
            'booking_id': confirmed_booking.booking_id,
            'rating_tourguide': 4,
            'rating_driver': 5,
            'review_tourguide': 'Knew every bird',
            'review_driver': None,
        })

        assert response.status_code == 201
        assert {r['subject_type'] for r in response.get_json()['ratings']} == {'tourguide', 'driver'}
        tour_guide = db.session.get(TourGuide, guide.user_id)
        assert (tour_guide.rating, tour_guide.total_ratings) == (4.0, 1)
        assert db.session.get(Driver, driver.user_id).rating == 5.0

    def test_average_over_bookings(self, client, customer, booking_factory, tour, guide, headers_for):
        for value in (5, 2):
            booking = booking_factory(tour_id=tour.tour_id, tour_guide_id=guide.user_id, status='completed')
            client.post('/api/ratings/submit', headers=headers_for(customer),
                        json={'booking_id': booking.booking_id, 'rating_tourguide': value})

        tour_guide = db.session.get(TourGuide, guide.user_id)
        assert tour_guide.rating == 3.5
        assert tour_guide.total_ratings == 2

    def test_duplicate_rating_conflicts(self, client, customer, confirmed_booking, headers_for):
        completed(confirmed_booking)
        body = {'booking_id': confirmed_booking.booking_id, 'rating_driver': 3}

        client.post('/api/ratings/submit', headers=headers_for(customer), json=body)
        response = client.post('/api/ratings/submit', headers=headers_for(customer), json=body)

        assert response.status_code == 409
        assert Rating.query.count() == 1

    def test_duplicate_caught_by_database_is_a_conflict(self, client, customer, confirmed_booking, headers_for,
                                                         monkeypatch):
        monkeypatch.setattr(RatingService, 'has_rating', staticmethod(lambda booking_id, subject_type=None: False))
        completed(confirmed_booking)
        body = {'booking_id': confirmed_booking.booking_id, 'rating_driver': 3}

        client.post('/api/ratings/submit', headers=headers_for(customer), json=body)
        response = client.post('/api/ratings/submit', headers=headers_for(customer), json=body)

        assert response.status_code == 409
        assert response.get_json()['code'] == 'DUPLICATE'
        assert Rating.query.count() == 1

    def test_out_of_range_rating(self, client, customer, confirmed_booking, headers_for):
        completed(confirmed_booking)
        response = client.post('/api/ratings/submit', headers=headers_for(customer),
                               json={'booking_id': confirmed_booking.booking_id, 'rating_driver': 6})
        assert response.status_code == 400

    def test_other_customer_cannot_rate(self, client, other_customer, confirmed_booking, headers_for):
        completed(confirmed_booking)
        response = client.post('/api/ratings/submit', headers=headers_for(other_customer),
                               json={'booking_id': confirmed_booking.booking_id, 'rating_driver': 4})
        assert response.status_code == 403


class TestRatingStatus:

    def test_status_before_and_after(self, client, customer, confirmed_booking, headers_for):
        url = f'/api/ratings/submit?booking_id={confirmed_booking.booking_id}'
        assert client.get(url, headers=headers_for(customer)).get_json() == {
            'can_rate': False, 'has_rating': False, 'rating': None,
        }

        completed(confirmed_booking)
        client.post('/api/ratings/submit', headers=headers_for(customer),
                    json={'booking_id': confirmed_booking.booking_id, 'rating_tour': 5})
        data = client.get(url, headers=headers_for(customer)).get_json()

        assert data['can_rate'] is True
        assert data['has_rating'] is True
        assert data['rating']['tour']['rating'] == 5

    def test_hr_sees_guide_ratings(self, client, customer, hr_employee, confirmed_booking, headers_for):
        completed(confirmed_booking)
        client.post('/api/ratings/submit', headers=headers_for(customer),
                    json={'booking_id': confirmed_booking.booking_id, 'rating_tourguide': 4})

        response = client.get('/api/employee/ratings', headers=headers_for(hr_employee))

        assert response.status_code == 200
        ratings = response.get_json()['ratings']
        assert len(ratings) == 1
        assert ratings[0]['tour_name'] == 'Coastal Escape'


class TestMyRatings:

    def test_guide_sees_own_ratings(self, client, customer, guide, booking_factory, tour, headers_for):
        for value in (5, 3):
            booking = booking_factory(tour_id=tour.tour_id, tour_guide_id=guide.user_id, status='completed')
            client.post('/api/ratings/submit', headers=headers_for(customer),
                        json={'booking_id': booking.booking_id, 'rating_tourguide': value})

        response = client.get('/api/ratings/mine', headers=headers_for(guide))

        assert response.status_code == 200
        data = response.get_json()
        assert data['total_ratings'] == 2
        assert data['average_rating'] == 4.0
        assert {r['tour_name'] for r in data['ratings']} == {'Coastal Escape'}

    def test_driver_does_not_see_guide_ratings(self, client, customer, confirmed_booking, driver, headers_for):
        completed(confirmed_booking)
        client.post('/api/ratings/submit', headers=headers_for(customer),
                    json={'booking_id': confirmed_booking.booking_id, 'rating_tourguide': 4})

        response = client.get('/api/ratings/mine', headers=headers_for(driver))

        assert response.status_code == 200
        assert response.get_json() == {'ratings': [], 'average_rating': 0.0, 'total_ratings': 0}

    def test_customers_forbidden(self, client, customer, headers_for):
        response = client.get('/api/ratings/mine', headers=headers_for(customer))
        assert response.status_code == 403
