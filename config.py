"""
Configuration for the School Fee Manager dashboard
"""
import logging
import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
INSTANCE_DIR = os.path.join(BASE_DIR, 'instance')


def database_uri():
    """Resolve the database URL, correcting the postgres:// scheme for SQLAlchemy"""
    database_url = os.environ.get('DATABASE_URL')
    if database_url and database_url.startswith("postgres://"):
        return database_url.replace("postgres://", "postgresql://", 1)
    if database_url:
        return database_url
    # Use SQLite for local development, placing the DB in the 'instance' folder
    return f"sqlite:///{os.path.join(INSTANCE_DIR, 'school_fees.db')}"


class Config:
    # Flask
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key-change-me')
    APP_NAME = os.environ.get('APP_NAME', 'School Fee Manager')
    CURRENCY_SYMBOL = os.environ.get('CURRENCY_SYMBOL', '₹')
    DEBUG = False
    TESTING = False

    # Session
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    PERMANENT_SESSION_LIFETIME = int(os.environ.get('SESSION_LIFETIME_SECONDS', '3600'))

    # Access tokens issued at sign-in
    AUTH_TOKEN_TTL = int(os.environ.get('AUTH_TOKEN_TTL', '3600'))
    AUTH_TOKEN_ALGORITHM = 'HS256'

    # Database
    SQLALCHEMY_DATABASE_URI = database_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    DEBUG = True
    SESSION_COOKIE_SECURE = False
    PREFERRED_URL_SCHEME = 'http'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    PREFERRED_URL_SCHEME = 'https'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': 10,
        'pool_timeout': 30,
        'pool_recycle': 1800,  # Recycle connections after 30 minutes
        'max_overflow': 2
    }


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'testing-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    WTF_CSRF_ENABLED = False
    SESSION_COOKIE_SECURE = False
    LOG_LEVEL = 'WARNING'


CONFIGS = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
}


def get_config(name=None):
    """Pick a config class by name, falling back to APP_CONFIG then production"""
    name = name or os.environ.get('APP_CONFIG', 'production')
    return CONFIGS.get(name, ProductionConfig)


def configure_logging(app):
    """Send application logs to stderr at the configured level"""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )
    app.logger.setLevel(level)
