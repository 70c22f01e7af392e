import os
from datetime import timedelta


def _database_url(default):
    url = os.getenv('DATABASE_URL', default)
    # Hosted Postgres hands out 'postgres://' but SQLAlchemy needs 'postgresql://'
    if url.startswith('postgres://'):
        url = url.replace('postgres://', 'postgresql://', 1)
    return url


def _csv(value):
    return [item.strip() for item in value.split(',') if item.strip()]


class Config:
    # Database
    SQLALCHEMY_DATABASE_URI = _database_url('sqlite:///workoutlogger.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    AUTO_CREATE_TABLES = False

    # JWT. The JWT_KEY environment variable always wins over this static value;
    # create_app refuses to start when both are missing.
    JWT_SECRET_KEY = None
    JWT_ALGORITHM = 'HS256'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=30)
    JWT_TOKEN_LOCATION = ['headers']
    JWT_HEADER_NAME = 'Authorization'
    JWT_HEADER_TYPE = 'Bearer'
    JWT_ISSUER = os.getenv('JWT_ISSUER')
    JWT_AUDIENCE = os.getenv('JWT_AUDIENCE')

    # HTTP
    API_PREFIX = '/api'
    CORS_ORIGINS = _csv(os.getenv('CORS_ORIGINS', 'https://localhost:54522'))

    # Identities
    GUEST_USERNAME_PREFIX = 'guest_'

    # Password policy
    PASSWORD_MIN_LENGTH = 8
    PASSWORD_REQUIRE_UPPERCASE = True
    PASSWORD_REQUIRE_LOWERCASE = True
    PASSWORD_REQUIRE_NUMBERS = True
    PASSWORD_REQUIRE_SPECIAL = True

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FILE = os.getenv('LOG_FILE')


class DevelopmentConfig(Config):
    # No signing key here: set JWT_KEY (see .env.example) or instance/config.py
    DEBUG = True
    AUTO_CREATE_TABLES = True
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    DEBUG = False
    # In production the key must come from JWT_KEY or instance/config.py
    JWT_SECRET_KEY = None
    PREFERRED_URL_SCHEME = 'https'


class TestingConfig(Config):
    TESTING = True
    AUTO_CREATE_TABLES = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    LOG_FILE = None


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
