"""
Read-only catalog of tours (with promotions) and vehicles.
"""
from datetime import date
from decimal import Decimal

from flask import current_app
from sqlalchemy import or_

from tourbook.errors import NotFoundError
from tourbook.extensions import db
from tourbook.models import Promotion, Tour, Vehicle
from tourbook.utils import normalize_image_path


def _active_promotion(tour_id, today):
    """Largest current discount for a tour"""
    return (
        Promotion.query
        .filter(Promotion.tour_id == tour_id, or_(Promotion.date.is_(None), Promotion.date >= today))
        .order_by(Promotion.dis.desc(), Promotion.promoid.desc())
        .first()
    )


def _tour_dict(tour, today):
    promotion = _active_promotion(tour.tour_id, today)
    price = Decimal(tour.price or 0)
    data = {
        "tour_id": tour.tour_id,
        "name": tour.name,
        "description": tour.description,
        "destination": tour.destination,
        "duration_days": tour.duration_days,
        "price": float(price),
        "availability": bool(tour.availability),
        "image_url": normalize_image_path(tour.image_url, current_app.config['DEFAULT_TOUR_IMAGE']),
        "tour_guide_id": tour.tour_guide_id,
        "discount": 0.0,
        "discounted_price": float(price),
        "promotion_ends": None,
    }
    if promotion is not None:
        discount = Decimal(promotion.dis)
        data["discount"] = float(discount)
        data["discounted_price"] = float((price * (100 - discount) / 100).quantize(Decimal('0.01')))
        data["promotion_ends"] = promotion.date.isoformat() if promotion.date else None
    return data


class TourService:

    @staticmethod
    def get_all_tours_with_promotions():
        today = date.today()
        tours = Tour.query.order_by(Tour.tour_id).all()
        return [_tour_dict(tour, today) for tour in tours]

    @staticmethod
    def get_tour(tour_id):
        tour = db.session.get(Tour, tour_id)
        if not tour:
            raise NotFoundError('Tour not found')
        return _tour_dict(tour, date.today())


class VehicleService:

    @staticmethod
    def get_available_vehicles():
        vehicles = Vehicle.query.order_by(Vehicle.vehicle_id).all()
        results = []
        for vehicle in vehicles:
            if not vehicle.is_available:
                continue
            data = vehicle.to_dict()
            data["image_url"] = normalize_image_path(vehicle.image_url)
            results.append(data)
        return results

    @staticmethod
    def get_vehicle(vehicle_id):
        vehicle = db.session.get(Vehicle, vehicle_id)
        if not vehicle:
            raise NotFoundError('Vehicle not found')
        data = vehicle.to_dict()
        data["image_url"] = normalize_image_path(vehicle.image_url)
        return data
