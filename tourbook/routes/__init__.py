"""
Route blueprints, mounted under /api by register_blueprints()
"""
from .admin import admin_bp
from .auth import auth_bp
from .bookings import bookings_bp
from .catalog import tours_bp, vehicles_bp
from .change_requests import change_requests_bp
from .drivers import drivers_bp
from .employee import employee_bp
from .itineraries import itineraries_bp
from .location import location_bp
from .payments import payments_bp
from .ratings import ratings_bp
from .tour_ops import tour_ops_bp

BLUEPRINTS = (
    (auth_bp, '/auth'),
    (bookings_bp, '/bookings'),
    (payments_bp, '/payments'),
    (admin_bp, '/admin'),
    (employee_bp, '/employee'),
    (drivers_bp, '/drivers'),
    (change_requests_bp, '/change-requests'),
    (ratings_bp, '/ratings'),
    (location_bp, '/location'),
    (tour_ops_bp, '/tour'),
    (tours_bp, '/tours'),
    (vehicles_bp, '/vehicles'),
    (itineraries_bp, '/itineraries'),
)


def register_blueprints(app, api_prefix='/api'):
    for blueprint, prefix in BLUEPRINTS:
        app.register_blueprint(blueprint, url_prefix=f'{api_prefix}{prefix}')
