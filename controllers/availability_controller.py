# controllers/availability_controller.py

from flask import Blueprint, request, jsonify

from db.extensions import db
from services.availability_service import AvailabilityService
from services.security import require_auth, require_owner
from services.slot_generator import SlotGenerator
from services.validators import require_json_object

availability_bp = Blueprint('availability', __name__)


@availability_bp.route('/availability/open', methods=['GET'])
def list_open_slots():
    slots = AvailabilityService(db.session).list_open(request.args.get('date'))
    return jsonify(slots), 200


@availability_bp.route('/availability/all', methods=['GET'])
@require_auth
@require_owner
def list_all_slots():
    return jsonify(AvailabilityService(db.session).list_all()), 200


@availability_bp.route('/availability/range', methods=['GET'])
@require_auth
@require_owner
def list_slots_in_range():
    slots = AvailabilityService(db.session).list_range(request.args.get('from'), request.args.get('to'))
    return jsonify(slots), 200


@availability_bp.route('/availability', methods=['POST'])
@require_auth
@require_owner
def create_slot():
    payload = require_json_object(request.get_json(silent=True))
    return jsonify(AvailabilityService(db.session).create(payload)), 201


@availability_bp.route('/availability/<int:slot_id>', methods=['PUT'])
@require_auth
@require_owner
def update_slot(slot_id):
    payload = require_json_object(request.get_json(silent=True))
    return jsonify(AvailabilityService(db.session).update(slot_id, payload)), 200


@availability_bp.route('/availability/<int:slot_id>', methods=['DELETE'])
@require_auth
@require_owner
def delete_slot(slot_id):
    return jsonify(AvailabilityService(db.session).delete(slot_id)), 200


@availability_bp.route('/availability/<int:slot_id>', methods=['PATCH'])
@require_auth
@require_owner
def toggle_slot(slot_id):
    payload = require_json_object(request.get_json(silent=True))
    return jsonify(AvailabilityService(db.session).toggle(slot_id, payload.get('is_open'))), 200


@availability_bp.route('/availability/generate', methods=['POST'])
@require_auth
@require_owner
def generate_slots():
    """
    Expand a recurring schedule into slots.

    Payload:
    {
      "from": "2026-03-02", "to": "2026-03-06",
      "weekdays": [1, 2, 3, 4, 5],
      "start_time": "16:00", "end_time": "22:00",
      "interval_minutes": 60, "is_open": true
    }
    """
    payload = require_json_object(request.get_json(silent=True))
    return jsonify(SlotGenerator(db.session).generate(payload)), 200


@availability_bp.route('/availability/bulk', methods=['POST'])
@require_auth
@require_owner
def bulk_insert_slots():
    payload = require_json_object(request.get_json(silent=True))
    return jsonify(SlotGenerator(db.session).bulk(payload.get('slots'))), 200
