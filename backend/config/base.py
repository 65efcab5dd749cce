"""Settings shared by every environment."""
import os
from datetime import timedelta

class BaseConfig:
    """Base configuration class."""

    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')

    # Database
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False

    # JWT Configuration
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'jwt-secret-key-change-in-production')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=2)

    # CORS
    CORS_ORIGINS = ["*"]

    # Rate Limiting
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = 'memory://'
    RATELIMIT_DEFAULT = "200 per day;50 per hour"
    ATTENDANCE_SUBMIT_RATE_LIMIT = "3 per minute"

    # Attendance sessions
    DEFAULT_SESSION_RADIUS_M = 100
    DEFAULT_SESSION_DURATION_MINUTES = 60
    SESSION_RADIUS_RANGE = (10, 10000)
    SESSION_DURATION_RANGE = (5, 480)
    SESSION_CODE_MAX_ATTEMPTS = 20

    # Show the previous submitter when a device is reused within a session
    EXPOSE_DEVICE_CONFLICT_IDENTITY = True

    # Logging
    LOG_LEVEL = 'INFO'
    LOG_FILE = 'logs/app.log'
