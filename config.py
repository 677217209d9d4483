import os
from datetime import timedelta


def _optional_float(name):
    value = os.environ.get(name)
    return float(value) if value else None


class Config:
    """Base configuration"""

    # Flask Settings
    SECRET_KEY = os.environ.get('SESSION_SECRET', 'CHANGE-THIS-SECRET-KEY-IN-PRODUCTION')
    PERMANENT_SESSION_LIFETIME = timedelta(days=7)
    SESSION_COOKIE_SECURE = False
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    # Firebase project bundle (public web keys, not secrets)
    FIREBASE_API_KEY = os.environ.get('FIREBASE_API_KEY')
    FIREBASE_PROJECT_ID = os.environ.get('FIREBASE_PROJECT_ID')
    FIREBASE_AUTH_DOMAIN = os.environ.get('FIREBASE_AUTH_DOMAIN')
    # None means requests waits on the provider's own behaviour
    FIREBASE_TIMEOUT = _optional_float('FIREBASE_TIMEOUT')

    # Backend selection: hosted Firebase when a project is configured,
    # otherwise the local SQL document store and admin account.
    DOCUMENT_BACKEND = os.environ.get(
        'DOCUMENT_BACKEND', 'firestore' if FIREBASE_PROJECT_ID else 'sql')
    AUTH_BACKEND = os.environ.get(
        'AUTH_BACKEND', 'firebase' if FIREBASE_API_KEY else 'local')

    # Database Settings (local document store)
    _database_url = os.environ.get('DATABASE_URL')
    if _database_url and _database_url.startswith("postgres://"):
        _database_url = _database_url.replace("postgres://", "postgresql://", 1)

    SQLALCHEMY_DATABASE_URI = _database_url or 'sqlite:///portfolio.db'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_recycle': 3600,
        'pool_pre_ping': True,
    }
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Upload Settings
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16MB
    MAX_IMAGE_SIZE = 2 * 1024 * 1024  # 2MB per embedded image
    ALLOWED_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp'}

    # JSON Settings
    JSON_AS_ASCII = False

    # Admin account for the local auth backend
    ADMIN_EMAIL = os.environ.get('ADMIN_EMAIL')
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD')
    LOGIN_MAX_ATTEMPTS = 5
    LOGIN_ATTEMPT_WINDOW = 300  # seconds

    # Admin Notification Settings
    ADMIN_TELEGRAM_BOT_TOKEN = os.environ.get('ADMIN_TELEGRAM_BOT_TOKEN')
    ADMIN_TELEGRAM_CHAT_ID = os.environ.get('ADMIN_TELEGRAM_CHAT_ID')
    ADMIN_SMTP_HOST = os.environ.get('ADMIN_SMTP_HOST')
    ADMIN_SMTP_PORT = os.environ.get('ADMIN_SMTP_PORT', '587')
    ADMIN_SMTP_EMAIL = os.environ.get('ADMIN_SMTP_EMAIL')
    ADMIN_SMTP_PASSWORD = os.environ.get('ADMIN_SMTP_PASSWORD')


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False
    SESSION_COOKIE_SECURE = True


class TestingConfig(Config):
    """Testing configuration"""
    DEBUG = True
    TESTING = True
    SECRET_KEY = 'testing-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    # For in-memory SQLite during tests, keep engine options empty to avoid
    # passing pool settings to SQLite's StaticPool.
    SQLALCHEMY_ENGINE_OPTIONS = {}
    DOCUMENT_BACKEND = 'sql'
    AUTH_BACKEND = 'local'
    ADMIN_EMAIL = 'admin@example.com'
    ADMIN_PASSWORD = 'password123'
    ADMIN_TELEGRAM_BOT_TOKEN = None
    ADMIN_TELEGRAM_CHAT_ID = None
    ADMIN_SMTP_HOST = None


# Select configuration based on environment
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config(config_name=None):
    """Get configuration by name, falling back to FLASK_ENV"""
    env = config_name or os.environ.get('FLASK_ENV', 'development')
    return config.get(env, config['default'])
