import logging
import os

from flask import Flask, flash, jsonify, redirect, render_template, request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from flask_wtf.csrf import CSRFError, CSRFProtect

from config import config

logger = logging.getLogger(__name__)

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()
csrf = CSRFProtect()


def get_real_ip():
    """Client address behind a reverse proxy (first X-Forwarded-For hop)"""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.headers.get("X-Real-IP") or get_remote_address()


limiter = Limiter(
    key_func=get_real_ip,
    default_limits=["5000 per day", "500 per hour"],
)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Content-Security-Policy": "; ".join(
        [
            "default-src 'self'",
            "style-src 'self' 'unsafe-inline'",
            # avatars come from DiceBear or admin-provided URLs
            "img-src 'self' data: https:",
            "frame-ancestors 'none'",
            "base-uri 'self'",
            "form-action 'self'",
        ]
    ),
}

# status -> (JSON message for /api/, template otherwise)
ERROR_PAGES = {
    400: ("Bad request", "errors/400.html"),
    403: ("Access forbidden", "errors/403.html"),
    404: ("Resource not found", "errors/404.html"),
    429: ("Too many requests", "errors/429.html"),
    500: ("Internal server error", "errors/500.html"),
}


def create_app(config_name=None):
    app = Flask(__name__)

    config_name = config_name or os.environ.get("FLASK_CONFIG", "default")
    app.config.from_object(config[config_name]())

    app.config.update(
        SESSION_COOKIE_SAMESITE="Lax",
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SECURE=not app.debug
        and app.config.get("FLASK_ENV") == "production",
        PERMANENT_SESSION_LIFETIME=86400,  # 24 hours
        WTF_CSRF_TIME_LIMIT=None,
    )

    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)
    limiter.init_app(app)

    login_manager.login_view = "auth.login"
    login_manager.login_message = "Please log in to submit results."
    login_manager.login_message_category = "info"

    register_blueprints(app)
    register_error_handlers(app)
    register_template_filters(app)

    from gamenight.utils.logging_config import setup_logging

    setup_logging(app)

    if not app.config.get("TESTING", False):
        show_config_warnings(app, config_name)

    with app.app_context():
        db.create_all()

    return app


def register_blueprints(app):
    from gamenight.routes.admin import bp as admin_bp
    from gamenight.routes.api import bp as api_bp
    from gamenight.routes.auth import bp as auth_bp
    from gamenight.routes.main import bp as main_bp
    from gamenight.routes.results import bp as results_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(results_bp)
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(admin_bp, url_prefix="/admin")
    app.register_blueprint(api_bp, url_prefix="/api")


def show_config_warnings(app, config_name):
    """Log which configuration and database the app came up with"""
    import warnings

    logger.info(f"Game Night starting with '{config_name}' configuration")

    if config_name == "production" and app.config.get("DEBUG"):
        warnings.warn("DEBUG mode is enabled in production!", UserWarning)

    if not os.environ.get("SECRET_KEY"):
        logger.warning(
            "Using auto-generated SECRET_KEY (sessions will reset on restart). "
            "Run: python3 generate_secrets.py"
        )

    db_url = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    backend = db_url.split("://")[0] if "://" in db_url else "unknown"
    logger.info(f"Using database backend: {backend}")


def register_template_filters(app):
    from gamenight.utils.timezone_utils import format_played_at

    @app.template_filter("played_at")
    def played_at_filter(value):
        return format_played_at(value)

    @app.template_filter("opponent")
    def opponent_filter(tally):
        """'Bob (3)' for a most-beaten / most-lost-to cell, '-' when empty"""
        if tally is None:
            return "-"
        return f"{tally.name} ({tally.count})"


def _error_response(status):
    message, template = ERROR_PAGES[status]
    if request.path.startswith("/api/"):
        return jsonify({"error": message}), status
    return render_template(template), status


def register_error_handlers(app):
    @app.after_request
    def after_request(response):
        response.headers.update(SECURITY_HEADERS)
        if not app.debug:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return response

    @app.errorhandler(CSRFError)
    def handle_csrf_error(error):
        app.logger.warning(f"CSRF Error: {error.description} - Path: {request.path}")
        flash("Security token expired or invalid. Please try again.", "error")
        return redirect(request.url)

    @app.errorhandler(400)
    def bad_request_error(error):
        app.logger.warning(
            f"400 Bad Request: {error} - Path: {request.path} - Method: {request.method}"
        )
        return _error_response(400)

    @app.errorhandler(403)
    def forbidden_error(error):
        return _error_response(403)

    @app.errorhandler(404)
    def not_found_error(error):
        return _error_response(404)

    @app.errorhandler(429)
    def too_many_requests_error(error):
        app.logger.warning(f"Rate limit hit on {request.path}: {error.description}")
        return _error_response(429)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return _error_response(500)


from gamenight import models  # noqa: F401, E402 - imported for model registration
