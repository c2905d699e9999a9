# ticketeer/extensions.py
"""
Flask extensions initialization module.
Handles initialization and configuration of all Flask extensions.
"""

import logging

import redis
from flask_jwt_extended import JWTManager
from flask_mail import Mail
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

# Initialize extensions
db = SQLAlchemy()
jwt = JWTManager()
migrate = Migrate()
mail = Mail()
redis_client = None

logger = logging.getLogger(__name__)


def init_extensions(app):
    """Initialize all Flask extensions."""

    db.init_app(app)
    logger.info("SQLAlchemy initialized")

    migrate.init_app(app, db)
    logger.info("Flask-Migrate initialized")

    jwt.init_app(app)
    logger.info("JWT Manager initialized")

    mail.init_app(app)
    logger.info("Flask-Mail initialized")

    if not app.config.get("TESTING"):
        init_redis(app)

    return app


def init_redis(app):
    """Initialize the Redis connection used for pub/sub fan-out."""
    global redis_client
    try:
        redis_url = app.config.get("REDIS_URL", "redis://localhost:6379/0")
        redis_client = redis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=5,
            socket_connect_timeout=5,
            retry_on_timeout=True,
            health_check_interval=30,
        )

        redis_client.ping()
        logger.info("Redis initialized successfully")

    except redis.ConnectionError as e:
        logger.error(f"Failed to connect to Redis: {e}")
        if app.config.get("ENVIRONMENT") == "production":
            raise
        logger.warning("Real-time order notifications are disabled without Redis")
        redis_client = None

    return redis_client


def get_redis():
    return redis_client
