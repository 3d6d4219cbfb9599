"""Development configuration."""
import os

from .base import BaseConfig

class DevelopmentConfig(BaseConfig):
    """Development configuration class."""

    DEBUG = True
    TESTING = False

    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv('DEV_DATABASE_URL') or 'sqlite:///edutrack_dev.db'
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', 'false').lower() == 'true'

    LOG_LEVEL = 'DEBUG'
