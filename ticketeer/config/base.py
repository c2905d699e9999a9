import os


class ConfigurationError(Exception):
    """
    Raised when an invalid or unsupported configuration is requested.
    """
    pass


def _env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class BaseConfig:
    """
    Base configuration shared by all environments.
    """

    # Flask
    DEBUG = False
    TESTING = False
    ENVIRONMENT = "base"
    SECRET_KEY = os.getenv("SECRET_KEY")
    MAX_CONTENT_LENGTH = 5 * 1024 * 1024  # screenshot uploads

    # Security
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
    JWT_TOKEN_LOCATION = ["headers"]

    # Application
    APP_NAME = "Ticketeer"
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
    SUPPORT_EMAIL = os.getenv("SUPPORT_EMAIL", "support@ticketeer.com")

    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///ticketeer.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Redis / Celery
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", REDIS_URL)
    CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", REDIS_URL)

    # Mail
    MAIL_SERVER = os.getenv("MAIL_SERVER", "smtp.gmail.com")
    MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
    MAIL_USE_TLS = _env_bool("MAIL_USE_TLS", True)
    MAIL_USERNAME = os.getenv("MAIL_USERNAME")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", "noreply@ticketeer.com")
    MAIL_SUPPRESS_SEND = False

    # Storage
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "uploads/transfer-screenshots")
    TICKETS_FOLDER = os.getenv("TICKETS_FOLDER", "uploads/tickets")

    # Receipt verification
    TESSERACT_CMD = os.getenv("TESSERACT_CMD")
    OCR_LANGUAGE = os.getenv("OCR_LANGUAGE", "eng")
    MCB_JUICE_NUMBER = os.getenv("MCB_JUICE_NUMBER")
    AUTO_APPROVE_THRESHOLD = 40
    GRACE_PERIOD_THRESHOLD = 20
    GRACE_PERIOD_SECONDS = 5 * 60

    # Side channels
    PUBLISH_ENABLED = _env_bool("PUBLISH_ENABLED", True)
    METRICS_ENABLED = _env_bool("METRICS_ENABLED", False)

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_REQUESTS = _env_bool("LOG_REQUESTS", False)

    @classmethod
    def validate(cls):
        """Hook for environment-specific checks; the base accepts anything."""
        return cls
