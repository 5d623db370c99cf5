"""
Flask Application Factory

This module creates and configures the Flask application.
"""
import time
from flask import Flask, g, request, jsonify
from flask_cors import CORS

from .config import Config, get_config, resolve_base_dir, sqlite_uri_for
from .extensions import db, migrate, register_sqlite_pragmas
from .api import info_bp, article_bp, account_bp, content_bp
from .store.errors import ValidationError
from .store.registry import init_stores
from .utils.logger import setup_logger, get_logger


def create_app(config_class=None, overrides=None):
    """Create and configure Flask application.

    Args:
        config_class: Configuration class to use. If None, auto-detect from environment.
        overrides: Extra config values applied on top of the class (tests use
            this to point ``FILE_DB_BASE`` at a temporary directory).

    Returns:
        Configured Flask application instance
    """
    if config_class is None:
        config_class = get_config()

    app = Flask(__name__)
    app.config.from_object(config_class)
    if overrides:
        app.config.update(overrides)

    # The database lives inside the base directory unless DATABASE_URL or an
    # explicit URI override points elsewhere
    app.config['FILE_DB_BASE'] = resolve_base_dir(app.config.get('FILE_DB_BASE'))
    if not app.config.get('DATABASE_URL') and 'SQLALCHEMY_DATABASE_URI' not in (overrides or {}):
        app.config['SQLALCHEMY_DATABASE_URI'] = sqlite_uri_for(app.config['FILE_DB_BASE'])

    # Ensure data directories exist
    Config.init_paths(app.config['FILE_DB_BASE'])

    # Initialize logging
    setup_logger(
        log_level=app.config.get('LOG_LEVEL', 'INFO'),
        log_file=app.config.get('LOG_FILE')
    )

    logger = get_logger('app')

    # Initialize CORS
    cors_config = config_class.get_cors_config()
    CORS(app, resources={r"/api/*": cors_config})

    # Initialize database
    db.init_app(app)
    with app.app_context():
        register_sqlite_pragmas(db.engine)

    # Initialize Flask-Migrate
    migrate.init_app(app, db)

    # Build the configured store backend
    init_stores(app)

    _register_blueprints(app)
    _register_error_handlers(app)
    _register_request_hooks(app)
    _register_health_check(app)

    logger.info(
        f"Application initialized, backend: {app.config['STORE_BACKEND']}, "
        f"base dir: {app.config['FILE_DB_BASE']}"
    )

    return app


def _register_blueprints(app):
    """Register data API blueprints under /api/data."""
    for blueprint in (info_bp, article_bp, account_bp, content_bp):
        app.register_blueprint(blueprint, url_prefix='/api/data')


def _register_error_handlers(app):
    """Register global error handlers."""
    from .utils.responses import ApiResponse

    @app.errorhandler(ValidationError)
    def validation_error(error):
        return ApiResponse.bad_request(str(error))

    @app.errorhandler(400)
    def bad_request(error):
        msg = str(error.description) if hasattr(error, 'description') else 'Bad request'
        return ApiResponse.bad_request(msg)

    @app.errorhandler(404)
    def not_found(error):
        msg = str(error.description) if hasattr(error, 'description') else 'Resource not found'
        return ApiResponse.not_found(msg)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return ApiResponse.error('Method not allowed', 405, 'METHOD_NOT_ALLOWED')

    @app.errorhandler(500)
    def internal_error(error):
        logger = get_logger('error')
        logger.exception(error)
        return ApiResponse.server_error('Internal server error')


def _register_request_hooks(app):
    """Register request timing hooks."""

    @app.before_request
    def before_request():
        g.start_time = time.time()

    @app.after_request
    def after_request(response):
        if hasattr(g, 'start_time'):
            duration = (time.time() - g.start_time) * 1000
            if duration > app.config.get('SLOW_REQUEST_MS', 1000):
                logger = get_logger('slow_request')
                logger.warning(f"Slow request: {request.method} {request.path} took {duration:.2f}ms")
        return response


def _register_health_check(app):
    """Register health check endpoint."""

    @app.route('/api/health')
    def health_check():
        """Health check endpoint for container orchestration."""
        return jsonify({
            'status': 'healthy',
            'service': 'article-store',
            'backend': app.config['STORE_BACKEND'],
        })
