"""Development configuration."""
import os

from .base import BaseConfig

class DevelopmentConfig(BaseConfig):
    """Development configuration class."""

    DEBUG = True
    TESTING = False

    # Database (local SQLite file unless overridden)
    SQLALCHEMY_DATABASE_URI = os.getenv('DEV_DATABASE_URL', 'sqlite:///geo_attendance_dev.db')
    SQLALCHEMY_ECHO = False

    # Rate limiting (Redis optional in dev)
    RATELIMIT_STORAGE_URI = os.getenv('REDIS_URL', 'memory://')

    LOG_LEVEL = 'DEBUG'
