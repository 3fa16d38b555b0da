"""
Rating API routes
"""
from flask import Blueprint, jsonify, request

from tourbook.auth import require_roles
from tourbook.services.rating_service import RatingService

ratings_bp = Blueprint('ratings', __name__)


@ratings_bp.route('/submit', methods=['GET'])
@require_roles('customer')
def rating_status(ctx):
    """GET /api/ratings/submit?booking_id=1 -> {can_rate, has_rating, rating}"""
    booking_id = request.args.get('booking_id', type=int)
    if not booking_id:
        return jsonify({'error': 'booking_id is required'}), 400
    return jsonify(RatingService.rating_status(ctx, booking_id)), 200


@ratings_bp.route('/submit', methods=['POST'])
@require_roles('customer')
def submit_rating(ctx):
    """
    Rate a completed booking
    Body JSON: booking_id, rating_tourguide, rating_driver, rating_tour (int 1-5),
    review_tourguide, review_driver, review_tour (str or null)
    """
    data = request.get_json(silent=True) or {}
    ratings = RatingService.submit_rating(ctx, data)
    return jsonify({"message": "Thank you for your feedback", "ratings": ratings}), 201


@ratings_bp.route('/mine', methods=['GET'])
@require_roles('tourguide', 'driver')
def my_ratings(ctx):
    """GET /api/ratings/mine -> {ratings, average_rating, total_ratings}"""
    return jsonify(RatingService.get_my_ratings(ctx)), 200
