# config.py
import os
from dotenv import load_dotenv

load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "minhphat-dev-secret")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Store backend: "memory" (reseeded every start) or "sql"
    STORE_BACKEND = os.getenv("STORE_BACKEND", "memory").strip().lower()
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///storefront.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SEED_DATA = env_bool("SEED_DATA", True)

    # Admin session. The client idle window reads the same value.
    SESSION_TTL_MINUTES = int(os.getenv("SESSION_TTL_MINUTES", "15"))
    SESSION_WARNING_SECONDS = int(os.getenv("SESSION_WARNING_SECONDS", "120"))
    SESSION_SWEEP_SECONDS = int(os.getenv("SESSION_SWEEP_SECONDS", "300"))
    AUTH_COOKIE_NAME = os.getenv("AUTH_COOKIE_NAME", "admin_session")
    COOKIE_SECURE = env_bool("COOKIE_SECURE", os.getenv("FLASK_ENV") == "production")

    # Default admin created by the seed
    ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")
    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@minhphat.com")
    ADMIN_FULL_NAME = os.getenv("ADMIN_FULL_NAME", "Administrator")

    PING_MESSAGE = os.getenv("PING_MESSAGE", "ping")
    MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "100"))


class TestConfig(Config):
    TESTING = True
    STORE_BACKEND = "memory"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SEED_DATA = True
    SESSION_SWEEP_SECONDS = 0
    COOKIE_SECURE = False
