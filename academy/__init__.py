"""
Academy Website Backend - Application Factory

This module provides the Flask application factory pattern for creating
and configuring the application instance.
"""

import logging
import os

from flask import Flask, session
from sqlalchemy.exc import SQLAlchemyError

from academy.extensions import db, login_manager, mail
from academy.config import Config

logger = logging.getLogger(__name__)


def create_app(config_class=Config):
    """Create and configure the Flask application.

    Args:
        config_class: Configuration class to use (default: Config)

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)
    app.config.from_object(config_class)
    _configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)
    login_manager.login_view = 'admin.login'
    mail.init_app(app)

    from academy.services import init_services
    init_services(app, mail)

    # Register blueprints
    from academy.admin import admin_bp
    from academy.api import api_bp

    app.register_blueprint(admin_bp, url_prefix='/admin')
    app.register_blueprint(api_bp, url_prefix='/api')

    @app.before_request
    def refresh_session_window():
        """Sliding expiry: every request pushes the cookie lifetime forward."""
        session.permanent = True

    # User loader for Flask-Login
    @login_manager.user_loader
    def load_user(user_id):
        from academy.models import AdminUser
        return db.session.get(AdminUser, int(user_id))

    # Create database tables
    with app.app_context():
        os.makedirs(os.path.join(config_class.basedir, 'instance'), exist_ok=True)
        db.create_all()
        _ensure_default_data(app)

    return app


def _configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s [%(name)s] %(message)s')
    app.logger.setLevel(level)


def _ensure_default_data(app):
    """Ensure the site_stats settings row exists."""
    from academy.models import Setting
    from academy.services import DEFAULT_SITE_STATS

    try:
        if not Setting.query.filter_by(category='site_stats').first():
            row = Setting(category='site_stats')
            row.values = dict(DEFAULT_SITE_STATS)
            db.session.add(row)
            db.session.commit()
            logger.info('Created default site_stats settings row')
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.warning('Could not create default settings row: %s', e)
