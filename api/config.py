"""
Environment-aware configuration.
Values are read once at import (after loading .env) and handed to the
token authority / password hasher by the app factory.
"""
import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present

DEFAULT_ACCESS_SECRET = "dev-access-secret-change-me"
DEFAULT_REFRESH_SECRET = "dev-refresh-secret-change-me"


class ConfigError(RuntimeError):
    pass


def _bool(value: str) -> bool:
    return str(value).lower() in ("1", "true", "yes")


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///accounts.db")
    SQL_ECHO = _bool(os.getenv("SQL_ECHO", "false"))

    # jwt configurations; access and refresh tokens are signed with distinct secrets
    ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", DEFAULT_ACCESS_SECRET)
    REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET", DEFAULT_REFRESH_SECRET)
    ACCESS_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("ACCESS_TOKEN_EXPIRES_SECONDS", "900")))
    REFRESH_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("REFRESH_TOKEN_EXPIRES_SECONDS", "604800")))
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "account-session-api")
    JWT_LEEWAY_SECONDS = int(os.getenv("JWT_LEEWAY_SECONDS", "0"))

    # argon2id cost parameters
    ARGON2_TIME_COST = int(os.getenv("ARGON2_TIME_COST", "3"))
    ARGON2_MEMORY_COST = int(os.getenv("ARGON2_MEMORY_COST", "65536"))
    ARGON2_PARALLELISM = int(os.getenv("ARGON2_PARALLELISM", "4"))

    # request limits; bodies over MAX_CONTENT_LENGTH are rejected with 413
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(10 * 1024)))
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "100 per 15 minutes")
    RATELIMIT_HEADERS_ENABLED = True
    AUTH_RATE_LIMIT = os.getenv("AUTH_RATE_LIMIT", "20 per 15 minutes")

    REFRESH_COOKIE_NAME = os.getenv("REFRESH_COOKIE_NAME", "refreshToken")
    REFRESH_COOKIE_PATH = "/api/v1/auth"
    REFRESH_COOKIE_SECURE = _bool(os.getenv("REFRESH_COOKIE_SECURE", "false"))

    @classmethod
    def validate(cls):
        """Hook for environment-specific startup checks."""


class DevelopmentConfig(BaseConfig):
    DEBUG = True


class TestingConfig(BaseConfig):
    TESTING = True
    DATABASE_URL = "sqlite://"
    ACCESS_TOKEN_SECRET = "test-access-secret-0123456789abcdefghij"
    REFRESH_TOKEN_SECRET = "test-refresh-secret-0123456789abcdefghij"
    ACCESS_TOKEN_EXPIRES = timedelta(minutes=15)
    REFRESH_TOKEN_EXPIRES = timedelta(days=7)
    # cheap hashing keeps the suite fast
    ARGON2_TIME_COST = 1
    ARGON2_MEMORY_COST = 1024
    ARGON2_PARALLELISM = 1
    RATELIMIT_DEFAULT = "1000 per minute"
    AUTH_RATE_LIMIT = "1000 per minute"


class ProductionConfig(BaseConfig):
    DEBUG = False
    REFRESH_COOKIE_SECURE = True

    @classmethod
    def validate(cls):
        if cls.ACCESS_TOKEN_SECRET in (DEFAULT_ACCESS_SECRET, "") or cls.REFRESH_TOKEN_SECRET in (
            DEFAULT_REFRESH_SECRET,
            "",
        ):
            raise ConfigError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must be set in production")
        if cls.ACCESS_TOKEN_SECRET == cls.REFRESH_TOKEN_SECRET:
            raise ConfigError("Access and refresh tokens must use different secrets")


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig
