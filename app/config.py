# app/config.py

import os


def _env_flag(name, default='false'):
    return os.getenv(name, default).lower() in ("true", "1", "t")


class Config:
    # Signs bearer tokens. Left unset, create_app generates an ephemeral dev key.
    SECRET_KEY = os.getenv('SECRET_KEY')
    ENV_NAME = os.getenv('APP_ENV', 'development')
    RELEASE_ID = os.getenv('RELEASE_ID', 'dev')
    DEBUG_MODE = _env_flag('DEBUG_MODE')

    # Database Configuration
    SQLALCHEMY_DATABASE_URI = os.getenv(
        'DATABASE_URI',
        'postgresql://postgres:postgres@db:5432/slotbook'
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,       # Validate connections before using
        "pool_recycle": 1800,        # Recycle every 30 minutes
        "pool_size": 10,
        "max_overflow": 20,
        "pool_timeout": 30,
        "connect_args": {
            "connect_timeout": 10,
            "options": "-c statement_timeout=30000"  # 30s query timeout
        }
    }

    # CORS
    ALLOWED_ORIGINS = [
        o.strip() for o in os.getenv('ALLOWED_ORIGINS', 'http://localhost:5173').split(',') if o.strip()
    ]

    # Mail Configuration
    MAIL_SERVER = os.getenv("MAIL_SERVER", "localhost")
    MAIL_PORT = int(os.getenv("MAIL_PORT", 587))
    MAIL_USE_TLS = _env_flag("MAIL_USE_TLS", "true")
    MAIL_USE_SSL = _env_flag("MAIL_USE_SSL")
    MAIL_USERNAME = os.getenv("MAIL_USERNAME")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", "no-reply@slotbook.local")
    MAIL_SUPPRESS_SEND = _env_flag("MAIL_SUPPRESS_SEND")

    # Redis Configuration (rate limiter)
    REDIS_URL = os.getenv('REDIS_URL')
    REDIS_TLS_ENABLED = _env_flag('REDIS_TLS_ENABLED')
    RATE_LIMIT_ENABLED = _env_flag('RATE_LIMIT_ENABLED', 'true')

    # Owner SMS (Twilio)
    TWILIO_ACCOUNT_SID = os.getenv('TWILIO_ACCOUNT_SID')
    TWILIO_AUTH_TOKEN = os.getenv('TWILIO_AUTH_TOKEN')
    TWILIO_FROM_NUMBER = os.getenv('TWILIO_FROM_NUMBER')
    OWNER_PHONE_NUMBER = os.getenv('OWNER_PHONE_NUMBER')
    NOTIFY_MAX_ATTEMPTS = int(os.getenv('NOTIFY_MAX_ATTEMPTS', 2))
    NOTIFY_TIMEOUT_SECONDS = int(os.getenv('NOTIFY_TIMEOUT_SECONDS', 10))
    NOTIFY_ASYNC = True

    # Payments
    STRIPE_SECRET = os.getenv('STRIPE_SECRET')

    # Accounts
    OWNER_REGISTRATION_SECRET = os.getenv('OWNER_REGISTRATION_SECRET')
    ADMIN_USERNAME = os.getenv('ADMIN_USERNAME')
    ADMIN_PASSWORD = os.getenv('ADMIN_PASSWORD')
    ADMIN_EMAIL_DOMAIN = os.getenv('ADMIN_EMAIL_DOMAIN', 'slotbook.local')
    USER_TOKEN_TTL_SECONDS = 7 * 24 * 3600
    OWNER_TOKEN_TTL_SECONDS = 12 * 3600

    # Scheduling
    BUSINESS_TIMEZONE = os.getenv('BUSINESS_TIMEZONE', 'America/New_York')
    SEED_AVAILABILITY_ON_STARTUP = _env_flag('SEED_AVAILABILITY_ON_STARTUP', 'true')
    SEED_DAYS_AHEAD = int(os.getenv('SEED_DAYS_AHEAD', 180))


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    ENV_NAME = 'testing'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    # busy timeout lets concurrent writers queue on the SQLite lock
    SQLALCHEMY_ENGINE_OPTIONS = {"connect_args": {"timeout": 30, "check_same_thread": False}}
    MAIL_SUPPRESS_SEND = True
    RATE_LIMIT_ENABLED = False
    SEED_AVAILABILITY_ON_STARTUP = False
    NOTIFY_ASYNC = False
    TWILIO_ACCOUNT_SID = None
    TWILIO_AUTH_TOKEN = None
    TWILIO_FROM_NUMBER = None
    OWNER_PHONE_NUMBER = None
    STRIPE_SECRET = None
    OWNER_REGISTRATION_SECRET = 'owner-secret'
    ADMIN_USERNAME = None
    ADMIN_PASSWORD = None
