import os
import warnings

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


class Config:
    """Settings shared by every environment"""

    # Database configuration
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(BASE_DIR, 'instance', 'budget_tracking.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
    }

    # JSON responses keep insertion order (envelope fields first)
    JSON_SORT_KEYS = False

    # Flask-Limiter
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
    RATELIMIT_STRATEGY = 'fixed-window'
    RATELIMIT_HEADERS_ENABLED = True
    RATELIMIT_DEFAULT = '300 per minute'

    # Budget alerts
    ALERT_DEDUP_WINDOW_HOURS = int(os.environ.get('ALERT_DEDUP_WINDOW_HOURS', 24))
    ALERT_DEFAULT_CHANNELS = ['SMS', 'EMAIL', 'PUSH']
    ALERT_RETENTION_DAYS = int(os.environ.get('ALERT_RETENTION_DAYS', 90))

    # Currency label used in insight messages
    CURRENCY = os.environ.get('CURRENCY', 'KES')

    # Optional clock override (see utils.clock); None means system time
    CLOCK = None

    @classmethod
    def init_app(cls, app):
        pass


class DevelopmentConfig(Config):
    DEBUG = True
    SQLALCHEMY_ECHO = os.environ.get('SQLALCHEMY_ECHO') == '1'


class ProductionConfig(Config):
    DEBUG = False

    # MUST be set in production
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')

    @classmethod
    def init_app(cls, app):
        super().init_app(app)

        uri = app.config.get('SQLALCHEMY_DATABASE_URI')
        if not uri:
            raise ValueError("DATABASE_URL environment variable must be set in production!")
        if uri.startswith('sqlite'):
            warnings.warn("Using SQLite in production is not recommended. Use PostgreSQL.")
        if app.config.get('RATELIMIT_STORAGE_URI', '').startswith('memory'):
            warnings.warn("In-memory rate limit storage is per worker; set RATELIMIT_STORAGE_URI to Redis.")


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    RATELIMIT_ENABLED = False


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
