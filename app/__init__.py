# app/__init__.py

import logging
import os
import secrets
import time
from flask import Flask, request, jsonify
from flask_cors import CORS
from sqlalchemy import text
from werkzeug.exceptions import HTTPException
from .config import Config
from db.extensions import db, migrate, mail, init_redis, check_redis_health
from controllers.auth_controller import auth_bp
from controllers.availability_controller import availability_bp
from controllers.booking_controller import booking_bp
from controllers.review_controller import review_bp
from controllers.payment_controller import payment_bp
from services.auth_service import AuthService
from services.errors import ApiError
from services.rate_limiter import enforce
from services.slot_generator import SlotGenerator, business_today

# Importing the models registers their tables on db.metadata
from models import user, availability, booking, payment, review  # noqa: F401

SLOW_REQUEST_MS = 500


def _resolve_secret_key(app):
    if app.config.get('SECRET_KEY'):
        return
    if app.config.get('ENV_NAME') == 'production':
        raise RuntimeError("FATAL: SECRET_KEY must be set in production")
    # Tokens won't survive a restart; fine for local development
    app.config['SECRET_KEY'] = secrets.token_hex(48)
    app.logger.warning("⚠️  No SECRET_KEY set, using an ephemeral dev secret")


def _run_startup_seeds(app):
    with app.app_context():
        db.create_all()
        username = app.config.get('ADMIN_USERNAME')
        password = app.config.get('ADMIN_PASSWORD')
        if username and password:
            AuthService(db.session).seed_admin(username, password, app.config['ADMIN_EMAIL_DOMAIN'])
        else:
            app.logger.warning("[Seed] ADMIN_USERNAME and ADMIN_PASSWORD not set, skipping admin seed.")

        if app.config.get('SEED_AVAILABILITY_ON_STARTUP'):
            SlotGenerator(db.session).seed_weekday_evenings(
                today=business_today(app.config['BUSINESS_TIMEZONE']),
                days_ahead=app.config['SEED_DAYS_AHEAD'],
            )


def create_app(config_object=Config, redis_client=None):
    app = Flask(__name__)
    started_at = time.time()

    # Load configuration
    app.config.from_object(config_object)

    # Configure logging
    debug_mode = app.config.get('DEBUG_MODE', False)
    log_level = logging.DEBUG if debug_mode else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    app.logger.setLevel(log_level)

    _resolve_secret_key(app)

    CORS(app,
         origins=app.config['ALLOWED_ORIGINS'],
         methods=['GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS'],
         allow_headers=['Content-Type', 'Authorization'],
         supports_credentials=True,
         max_age=3600
    )

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    mail.init_app(app)
    init_redis(app, redis_client)

    # Register blueprints
    app.register_blueprint(auth_bp, url_prefix='/api')
    app.register_blueprint(availability_bp, url_prefix='/api')
    app.register_blueprint(booking_bp, url_prefix='/api')
    app.register_blueprint(review_bp, url_prefix='/api')
    app.register_blueprint(payment_bp, url_prefix='/api')

    @app.before_request
    def before_request():
        request.start_time = time.time()
        if debug_mode:
            app.logger.debug(f"🚀 Started {request.method} {request.path}")
        if request.path.startswith('/api/') and request.method != 'OPTIONS':
            enforce('global')

    @app.after_request
    def after_request(response):
        if hasattr(request, 'start_time'):
            elapsed = (time.time() - request.start_time) * 1000

            # Log slow requests (over 500ms)
            if elapsed > SLOW_REQUEST_MS:
                app.logger.warning(
                    f"⚠️  SLOW REQUEST: {request.method} {request.path} "
                    f"took {elapsed:.2f}ms - Status: {response.status_code}"
                )
            elif debug_mode:
                app.logger.info(
                    f"✅ {request.method} {request.path} "
                    f"took {elapsed:.2f}ms - Status: {response.status_code}"
                )

        return response

    @app.errorhandler(ApiError)
    def handle_api_error(e):
        if e.status_code >= 500:
            app.logger.error(f"❌ {type(e).__name__}: {e.message}")
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        message = "Route not found" if e.code == 404 else e.description
        return jsonify({'message': message}), e.code

    # Global error handler
    @app.errorhandler(Exception)
    def handle_exception(e):
        app.logger.error(f"❌ Unhandled exception: {str(e)}", exc_info=True)
        db.session.rollback()
        body = {'message': 'Internal server error. Please try again.'}
        if debug_mode:
            body['error'] = str(e)
        return jsonify(body), 500

    # Health check endpoint
    @app.route('/api/health', methods=['GET'])
    def health_check():
        """Health check endpoint for monitoring"""
        try:
            db.session.execute(text('SELECT 1'))
        except Exception as e:
            app.logger.error(f"❌ Health check failed: {str(e)}")
            return jsonify({
                'status': 'error',
                'message': 'database unavailable',
                'timestamp': time.time()
            }), 500
        return jsonify({
            'status': 'ok',
            'release': app.config['RELEASE_ID'],
            'uptime': round(time.time() - started_at, 3),
            # the rate limiter fails open, so a Redis outage only degrades
            'redis': 'ok' if check_redis_health() else 'degraded',
        }), 200

    if not app.config.get('TESTING'):
        _run_startup_seeds(app)

    app.logger.info(
        f"Slotbook backend ready [{app.config.get('ENV_NAME')}] pid={os.getpid()}"
    )
    return app
