import logging
import os
from datetime import datetime

from flask import Flask, render_template, session
from flask_wtf.csrf import generate_csrf

from auth import auth_bp, current_auth
from config import INSTANCE_DIR, configure_logging, get_config
from dashboard import dashboard_bp
from extensions import csrf, db
from health import health_bp
from records import PAID, PARTIALLY_PAID
from security import init_security

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    PAID: 'Paid',
    PARTIALLY_PAID: 'Partial',
}


def create_app(config_name=None):
    app = Flask(
        __name__,
        template_folder=os.path.join(os.path.dirname(os.path.abspath(__file__)), 'templates'),
        instance_path=INSTANCE_DIR,
    )
    app.config.from_object(get_config(config_name))
    configure_logging(app)

    # Set up instance path for SQLite and other app data
    os.makedirs(app.instance_path, exist_ok=True)

    db.init_app(app)
    csrf.init_app(app)
    init_security(app)

    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(dashboard_bp)

    register_template_helpers(app)
    register_error_handlers(app)

    logger.debug("Application created with %s", app.config['SQLALCHEMY_DATABASE_URI'].split('://')[0])
    return app


def register_template_helpers(app):
    # Ensure csrf_token() is available in Jinja templates
    @app.context_processor
    def inject_globals():
        return {
            'csrf_token': generate_csrf,
            'app_name': app.config.get('APP_NAME'),
            'currency': app.config.get('CURRENCY_SYMBOL', ''),
            'signed_in': current_auth() is not None,
            'user_email': session.get('email'),
            'now': datetime.utcnow,
        }

    @app.template_filter('money')
    def money_filter(value):
        """Format amount with comma separators (2 decimal places)"""
        try:
            return "{:,.2f}".format(value or 0)
        except (ValueError, TypeError):
            return value

    @app.template_filter('short_date')
    def short_date_filter(value):
        if not value:
            return '-'
        return f'{value.month}/{value.day}/{value.year}'

    @app.template_filter('status_label')
    def status_label_filter(value):
        return STATUS_LABELS.get(value, 'Unpaid')


def register_error_handlers(app):
    @app.errorhandler(404)
    def not_found(e):
        return render_template('error.html', code=404, message='Page not found'), 404

    @app.errorhandler(500)
    def server_error(e):
        db.session.rollback()
        logger.error("Unhandled error: %s", getattr(e, 'original_exception', e), exc_info=True)
        return render_template('error.html', code=500, message='Something went wrong'), 500


if __name__ == '__main__':
    create_app(os.environ.get('APP_CONFIG', 'development')).run()
