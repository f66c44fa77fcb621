# controllers/payment_controller.py

from flask import Blueprint, request, jsonify

from db.extensions import db
from services.payment_service import PaymentService
from services.security import require_auth
from services.validators import require_json_object

payment_bp = Blueprint('payment', __name__)


@payment_bp.route('/payments/intent', methods=['POST'])
@require_auth
def create_payment_intent():
    payload = require_json_object(request.get_json(silent=True))
    return jsonify(PaymentService(db.session).create_intent(payload)), 200
