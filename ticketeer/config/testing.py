from .base import BaseConfig


class TestingConfig(BaseConfig):
    """
    Test configuration: in-memory database, no broker, no outbound mail.
    """

    TESTING = True
    ENVIRONMENT = "testing"

    SECRET_KEY = "test-secret-key"
    JWT_SECRET_KEY = "test-jwt-secret-key-long-enough-for-hs256"

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"

    MAIL_SUPPRESS_SEND = True
    MAIL_DEFAULT_SENDER = "test@example.com"

    MCB_JUICE_NUMBER = "+230 5123 4567"
    PUBLISH_ENABLED = False
    METRICS_ENABLED = False
