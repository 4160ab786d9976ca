"""
Application configuration, read from the environment (and a local .env file).
"""

import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///dashboard.db")
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}
    SECRET_KEY = os.getenv("SESSION_SECRET", "dev-secret-change-me")

    # Account registered with this exact address is provisioned as CEO
    CEO_EMAIL = os.getenv("CEO_EMAIL", "ceo@company.com")

    SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", "3600"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    LOGIN_RATE_LIMIT = "5 per minute"
    REGISTER_RATE_LIMIT = "3 per minute"

    TESTING = False


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    SECRET_KEY = "test-secret-key-for-testing-only"
    CEO_EMAIL = "ceo@company.com"
    RATELIMIT_ENABLED = False
    LOG_LEVEL = "WARNING"
