"""
Environment-aware configuration.
Every value can be overridden from the environment (or a .env file).
"""
import os
from dotenv import load_dotenv

load_dotenv()  # Read .env if present


def _env_bool(key: str, default: bool) -> bool:
    v = os.getenv(key)
    if v is None:
        return default
    return v.lower() in ("1", "true", "yes", "on")


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///prompt-studio.db")
    SQL_ECHO = _env_bool("SQL_ECHO", False)

    # Access tokens
    JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me-to-32-plus-bytes")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "prompt-studio-api")
    # <number><d|h|m|s>; unsupported values fall back to one hour
    JWT_EXPIRES_IN = os.getenv("JWT_EXPIRES_IN", "1h")

    # Refresh tokens
    REFRESH_TOKEN_TTL_DAYS = int(os.getenv("REFRESH_TOKEN_TTL_DAYS", "30"))
    # 0 disables the background sweep; `flask cleanup-tokens` still works
    TOKEN_CLEANUP_INTERVAL_MINUTES = int(os.getenv("TOKEN_CLEANUP_INTERVAL_MINUTES", "60"))

    # Per-client request budget on /api/v1 (RATELIMIT_* keys are read by Flask-Limiter)
    RATE_LIMIT_MAX_REQUESTS = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "100"))
    RATE_LIMIT_WINDOW_MINUTES = int(os.getenv("RATE_LIMIT_WINDOW_MINUTES", "15"))
    RATELIMIT_ENABLED = _env_bool("RATE_LIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.getenv("RATE_LIMIT_STORAGE_URI", "memory://")
    RATELIMIT_HEADERS_ENABLED = True


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    # In dev, propagate exceptions so our error handler has full context
    PROPAGATE_EXCEPTIONS = True
    SQL_ECHO = _env_bool("SQL_ECHO", True)


class TestingConfig(BaseConfig):
    TESTING = True
    DATABASE_URL = "sqlite://"
    SQL_ECHO = False
    JWT_SECRET = "test-secret-with-at-least-32-bytes!!"
    JWT_EXPIRES_IN = "15m"
    TOKEN_CLEANUP_INTERVAL_MINUTES = 0
    RATELIMIT_ENABLED = False
    LOG_LEVEL = "WARNING"


class ProductionConfig(BaseConfig):
    DEBUG = False


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
