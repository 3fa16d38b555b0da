from flask import Blueprint, jsonify

from tourbook.services.catalog import TourService, VehicleService

tours_bp = Blueprint('tours', __name__)
vehicles_bp = Blueprint('vehicles', __name__)


@tours_bp.route('', methods=['GET'])
def list_tours():
    return jsonify(TourService.get_all_tours_with_promotions()), 200


@tours_bp.route('/<int:tour_id>', methods=['GET'])
def get_tour(tour_id):
    return jsonify(TourService.get_tour(tour_id)), 200


@vehicles_bp.route('', methods=['GET'])
def list_vehicles():
    return jsonify(VehicleService.get_available_vehicles()), 200


@vehicles_bp.route('/<int:vehicle_id>', methods=['GET'])
def get_vehicle(vehicle_id):
    return jsonify(VehicleService.get_vehicle(vehicle_id)), 200
