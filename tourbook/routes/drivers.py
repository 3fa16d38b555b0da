from flask import Blueprint, jsonify, request

from tourbook.services.availability import available_drivers
from tourbook.utils import parse_date

drivers_bp = Blueprint('drivers', __name__)


@drivers_bp.route('', methods=['GET'])
def list_drivers():
    """
    Drivers, free ones only when a date range is given
    GET /api/drivers?startDate=2025-06-01&endDate=2025-06-05
    """
    start = request.args.get('startDate')
    end = request.args.get('endDate')
    if start and end:
        drivers = available_drivers(parse_date(start, 'startDate'), parse_date(end, 'endDate'))
    else:
        drivers = available_drivers()
    return jsonify({"drivers": drivers}), 200
