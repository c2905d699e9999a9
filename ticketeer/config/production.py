from .base import BaseConfig, ConfigurationError


class ProductionConfig(BaseConfig):
    """
    Production configuration.
    """

    DEBUG = False
    ENVIRONMENT = "production"

    SESSION_COOKIE_SECURE = True

    @classmethod
    def validate(cls):
        # MUST be set via environment variables in real production
        if not cls.SECRET_KEY or cls.SECRET_KEY == "dev-secret-key":
            raise ConfigurationError("SECRET_KEY must be set and secure in production mode")

        if not cls.JWT_SECRET_KEY or cls.JWT_SECRET_KEY == "dev-jwt-secret":
            raise ConfigurationError("JWT_SECRET_KEY must be set and secure in production mode")

        if "sqlite" in cls.SQLALCHEMY_DATABASE_URI.lower():
            raise ConfigurationError("SQLite is not suitable for production")

        return cls
