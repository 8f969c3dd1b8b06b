import os
import logging
import click
from logging.handlers import RotatingFileHandler
from flask import Flask
from werkzeug.exceptions import HTTPException
from config import config
from extensions import db, migrate, limiter
from utils.exceptions import BudgetTrackingError
from utils.responses import api_error


def configure_logging(app):
    """Configure application logging"""
    if not app.debug and not app.testing:
        # Create logs directory if it doesn't exist
        if not os.path.exists('logs'):
            os.mkdir('logs')

        file_handler = RotatingFileHandler(
            'logs/budget_tracking.log',
            maxBytes=10240000,  # 10MB
            backupCount=10
        )
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s %(name)s: %(message)s '
            '[in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)

        # Service modules log through their own loggers
        for name in ('services', 'blueprints'):
            service_logger = logging.getLogger(name)
            service_logger.addHandler(file_handler)
            service_logger.setLevel(logging.INFO)

        app.logger.setLevel(logging.INFO)
        app.logger.info('Budget tracking startup')
    else:
        # Development logging to console
        app.logger.setLevel(logging.DEBUG)
        logging.getLogger('services').setLevel(logging.DEBUG)
        app.logger.info('Budget tracking startup (DEBUG mode)')


def create_app(config_name=None):
    """Application factory pattern"""

    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config[config_name])
    config[config_name].init_app(app)

    # Keep envelope fields in insertion order
    app.json.sort_keys = app.config.get('JSON_SORT_KEYS', False)

    # Default SQLite database lives in the instance folder
    os.makedirs(app.instance_path, exist_ok=True)

    # Configure logging
    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)

    # Import models to ensure they're registered with SQLAlchemy
    with app.app_context():
        import models

    # Register blueprints
    from blueprints.budgets import budgets_bp
    from blueprints.alerts import alerts_bp
    from blueprints.transactions import transactions_bp
    from blueprints.categories import bp as categories_bp
    from blueprints.analytics import analytics_bp

    app.register_blueprint(budgets_bp)
    app.register_blueprint(alerts_bp)
    app.register_blueprint(transactions_bp)
    app.register_blueprint(categories_bp)
    app.register_blueprint(analytics_bp)

    # Create database tables
    with app.app_context():
        db.create_all()

    # Register error handlers
    register_error_handlers(app)

    # Register CLI commands
    register_commands(app)

    return app


def register_error_handlers(app):
    """Register global error handlers; every error leaves as the JSON envelope"""

    @app.errorhandler(BudgetTrackingError)
    def budget_tracking_error(error):
        if error.status_code >= 500:
            db.session.rollback()
            app.logger.error(f'Budget tracking error: {error.message}')
        else:
            app.logger.warning(f'{type(error).__name__}: {error.message}')
        return api_error(error.message, error.status_code, error.errors)

    @app.errorhandler(404)
    def not_found_error(error):
        return api_error('Resource not found', 404)

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        return api_error('Method not allowed', 405)

    @app.errorhandler(HTTPException)
    def http_error(error):
        return api_error(error.description or error.name, error.code)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error(f'Internal Server Error: {error}')
        return api_error('An unexpected error occurred. Please try again later.', 500)

    @app.errorhandler(Exception)
    def unexpected_error(error):
        db.session.rollback()
        app.logger.exception('Unhandled exception')
        return api_error('An unexpected error occurred. Please try again later.', 500)


def register_commands(app):
    """Register Flask CLI commands."""

    @app.cli.group()
    def alerts():
        """Budget alert maintenance."""
        pass

    @alerts.command('sweep')
    def sweep_alerts():
        """Evaluate every budget that is active today and create due alerts."""
        from services.budget_service import BudgetService
        result = BudgetService.sweep_alerts()
        click.echo(
            f"Checked {result['checked']} budget(s), "
            f"created {result['alerts_created']} alert(s), "
            f"{len(result['failed'])} failure(s)."
        )
        for failure in result['failed']:
            click.echo(f"  budget {failure['budget_id']}: {failure['error']}", err=True)

    @alerts.command('purge')
    @click.option('--days', type=int, default=None,
                  help='Delete alerts older than this many days (default ALERT_RETENTION_DAYS).')
    def purge_alerts(days):
        """Delete old alerts."""
        from services.alert_service import AlertService
        if days is not None and days < 1:
            click.echo('ERROR: --days must be a positive integer', err=True)
            return
        deleted = AlertService.delete_old_alerts(days)
        click.echo(f'Deleted {deleted} alert(s).')


if __name__ == '__main__':
    app = create_app()
    # SECURITY: Only bind to localhost in development
    app.run(host='127.0.0.1', port=5000, debug=True)
