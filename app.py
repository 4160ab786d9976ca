"""
Application factory: extensions, login loaders, blueprints and CLI commands.
"""

import logging
import uuid

import click
from flask import Flask, jsonify, request

from config import Config
from extensions import limiter, login_manager
from models import db, Sector, User, DEFAULT_SECTOR_NAMES

logger = logging.getLogger(__name__)


def _configure_logging(app: Flask) -> None:
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app.logger.setLevel(level)


def _register_login(app: Flask) -> None:
    from services.identity_service import get_identity_service

    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        try:
            return db.session.get(User, uuid.UUID(str(user_id)))
        except ValueError:
            return None

    @login_manager.request_loader
    def load_user_from_token(req):
        header = req.headers.get("Authorization", "")
        if not header.startswith("Bearer "):
            return None
        return get_identity_service().get_user(header[len("Bearer "):].strip())

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({
            'success': False,
            'message': 'Authentication required'
        }), 401


def _register_blueprints(app: Flask) -> None:
    from routes.auth import auth_bp
    from routes.api_sectors import api_sectors_bp
    from routes.api_tasks import api_tasks_bp
    from routes.dashboard import dashboard_bp
    from routes.health import health_bp

    for bp in (auth_bp, api_sectors_bp, api_tasks_bp, dashboard_bp, health_bp):
        app.register_blueprint(bp)
        logger.debug(f"Registered blueprint {bp.name} at {bp.url_prefix}")


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'success': False, 'message': f'Not found: {request.path}'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'success': False, 'message': 'Method not allowed'}), 405

    @app.errorhandler(429)
    def rate_limited(error):
        return jsonify({
            'success': False,
            'message': 'Too many attempts. Please wait a minute and try again.'
        }), 429


def seed_default_sectors() -> int:
    """Insert the default sectors when the table is empty. Returns how many were added."""
    if db.session.query(Sector.id).first() is not None:
        return 0
    for name in DEFAULT_SECTOR_NAMES:
        db.session.add(Sector(name=name))
    db.session.commit()
    return len(DEFAULT_SECTOR_NAMES)


def _register_commands(app: Flask) -> None:
    @app.cli.command("init-db")
    def init_db():
        """Create all tables and seed the default sectors."""
        db.create_all()
        added = seed_default_sectors()
        click.echo(f"Database ready ({added} default sectors added)")


def create_app(config_class=Config) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_class)

    _configure_logging(app)

    db.init_app(app)
    _register_login(app)
    limiter.init_app(app)

    _register_blueprints(app)
    _register_error_handlers(app)
    _register_commands(app)

    if not app.config.get("TESTING"):
        from utils.startup_validation import run_startup_validation

        with app.app_context():
            run_startup_validation(db.engine)

    logger.info(f"Application created (ceo account: {app.config.get('CEO_EMAIL')})")
    return app
