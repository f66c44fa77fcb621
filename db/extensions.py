# db/extensions.py

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_mail import Mail
from flask import current_app
from sqlalchemy import event
from sqlalchemy.engine import Engine
import redis
from redis.connection import ConnectionPool, SSLConnection
import urllib.parse
import logging

db = SQLAlchemy()
migrate = Migrate()
mail = Mail()

logger = logging.getLogger(__name__)


@event.listens_for(Engine, "connect")
def enable_sqlite_fk(dbapi_connection, _):
    """SQLite ignores foreign keys (and ON DELETE SET NULL) unless asked per connection."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_redis_pool(config):
    """
    Create a Redis connection pool to reuse connections.
    Used by the rate limiter; one pool per app.
    """
    redis_url = config.get('REDIS_URL')
    use_tls = config.get('REDIS_TLS_ENABLED', False)

    if redis_url:
        parsed = urllib.parse.urlparse(redis_url)

        pool_kwargs = {
            'host': parsed.hostname,
            'port': parsed.port or 6379,
            'username': parsed.username,
            'password': parsed.password,
            'decode_responses': True,
            'socket_connect_timeout': 10,
            'socket_timeout': 5,
            'socket_keepalive': True,
            'retry_on_timeout': True,
            'health_check_interval': 30,
            'max_connections': 50,
        }

        if use_tls or parsed.scheme == 'rediss':
            pool_kwargs.update({
                'connection_class': SSLConnection,
                'ssl_cert_reqs': None,
                'ssl_check_hostname': False,
            })
            logger.info("✅ Redis pool with SSL/TLS enabled")

        pool = ConnectionPool(**pool_kwargs)
        logger.info(f"✅ Redis connection pool created: {parsed.hostname}")
        return pool

    # Local development
    logger.info("🔧 Local Redis pool")
    return ConnectionPool(
        host=config.get('REDIS_HOST', 'localhost'),
        port=int(config.get('REDIS_PORT', 6379)),
        db=int(config.get('REDIS_DB', 0)),
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        retry_on_timeout=True,
        max_connections=20,
    )


def init_redis(app, client=None):
    """Attach a Redis client to the app. Tests pass their own client."""
    if client is None:
        client = redis.Redis(connection_pool=create_redis_pool(app.config))
    app.extensions['redis'] = client
    return client


def get_redis():
    return current_app.extensions['redis']


def check_redis_health():
    """Check Redis connection health"""
    try:
        get_redis().ping()
        return True
    except redis.exceptions.RedisError as e:
        logger.error(f"❌ Redis health check failed: {str(e)}")
        return False
