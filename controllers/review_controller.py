# controllers/review_controller.py

from flask import Blueprint, request, jsonify

from db.extensions import db
from services.rate_limiter import rate_limit
from services.review_service import ReviewService
from services.security import current_user_id, require_auth
from services.validators import require_json_object

review_bp = Blueprint('review', __name__)


@review_bp.route('/reviews', methods=['GET'])
def list_reviews():
    return jsonify(ReviewService(db.session).list_reviews()), 200


@review_bp.route('/reviews', methods=['POST'])
@rate_limit('review')
@require_auth
def submit_review():
    payload = require_json_object(request.get_json(silent=True))
    return jsonify(ReviewService(db.session).submit(current_user_id(), payload)), 201
