# controllers/auth_controller.py

from flask import Blueprint, request, jsonify

from db.extensions import db
from services.auth_service import AuthService
from services.rate_limiter import rate_limit
from services.validators import require_json_object

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/auth/register', methods=['POST'])
@rate_limit('auth')
def register():
    payload = require_json_object(request.get_json(silent=True))
    return jsonify(AuthService(db.session).register(payload)), 201


@auth_bp.route('/auth/login', methods=['POST'])
@rate_limit('auth')
def login():
    payload = require_json_object(request.get_json(silent=True))
    return jsonify(AuthService(db.session).login(payload)), 200


@auth_bp.route('/auth/owner-login', methods=['POST'])
@rate_limit('auth')
def owner_login():
    payload = require_json_object(request.get_json(silent=True))
    return jsonify(AuthService(db.session).owner_login(payload)), 200
