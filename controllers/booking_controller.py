# controllers/booking_controller.py

from flask import Blueprint, request, jsonify, g

from db.extensions import db
from services.booking_service import BookingService
from services.rate_limiter import rate_limit
from services.security import current_user_id, optional_auth, require_auth, require_owner
from services.validators import require_json_object, sanitize_payload

booking_bp = Blueprint('booking', __name__)


@booking_bp.route('/bookings/me', methods=['GET'])
@require_auth
def my_bookings():
    return jsonify(BookingService(db.session).list_for_user(current_user_id())), 200


@booking_bp.route('/bookings/all', methods=['GET'])
@require_auth
@require_owner
def all_bookings():
    return jsonify(BookingService(db.session).list_all()), 200


@booking_bp.route('/bookings', methods=['POST'])
@rate_limit('booking')
@optional_auth
def create_booking():
    """
    Book an open slot. Guests are matched (or created) by email.

    Payload:
    {
      "availability_id": 12,
      "service": "Full Cut",          // Full Cut | Lineup | Mobile
      "customer_name": "Jane Doe",
      "customer_email": "jane@example.com",
      "address": "1 Main St"          // required for Mobile
    }
    """
    payload = sanitize_payload(require_json_object(request.get_json(silent=True)))
    booking = BookingService(db.session).create_booking(
        payload, authenticated_user_id=current_user_id()
    )
    return jsonify(booking), 201


@booking_bp.route('/bookings/<int:booking_id>/cancel', methods=['POST'])
@require_auth
def cancel_booking(booking_id):
    return jsonify(BookingService(db.session).cancel(booking_id, g.user)), 200
