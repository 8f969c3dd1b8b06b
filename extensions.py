"""
Flask extension instances shared across the application.

Created unbound here and attached to the app in ``create_app`` so that
models, services and blueprints can import them without circular imports.
"""
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address


db = SQLAlchemy()
migrate = Migrate()
limiter = Limiter(key_func=get_remote_address)
