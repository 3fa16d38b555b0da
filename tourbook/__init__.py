import logging
import os

import click
from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from tourbook.errors import TourbookError
from tourbook.extensions import db, limiter
from tourbook.sanitize import sanitize_dict

logger = logging.getLogger(__name__)


def _init_sentry(app):
    """Sentry error monitoring (optional -- only active when SENTRY_DSN is set)"""
    dsn = app.config.get('SENTRY_DSN')
    if not dsn:
        return
    import sentry_sdk
    from sentry_sdk.integrations.flask import FlaskIntegration
    sentry_sdk.init(
        dsn=dsn,
        integrations=[FlaskIntegration()],
        traces_sample_rate=0.1,
    )


def _register_error_handlers(app):

    @app.errorhandler(TourbookError)
    def handle_domain_error(e):
        if e.status_code >= 500:
            logger.error("%s: %s", type(e).__name__, e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(429)
    def ratelimit_handler(e):
        # Retry-After header is set by Flask-Limiter; read it back.
        retry_after = e.get_headers().get("Retry-After") if hasattr(e, "get_headers") else None
        return jsonify({
            "error": "Too many requests. Please try again later.",
            "retry_after": int(retry_after) if retry_after else 60,
        }), 429

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"error": e.description, "code": e.name.upper().replace(' ', '_')}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        db.session.rollback()
        return jsonify({"error": "Server error", "code": "SERVER_ERROR"}), 500


def _register_cli(app):

    @app.cli.command("init-db")
    def cli_init_db():
        """Create all tables."""
        db.create_all()
        click.echo("Database tables created.")

    @app.cli.command("purge-locations")
    @click.option("--days", type=int, default=None, help="Retention window in days.")
    def cli_purge_locations(days):
        """Delete location pings older than the retention window."""
        from tourbook.services.location_service import LocationService
        days = days or app.config['LOCATION_RETENTION_DAYS']
        deleted = LocationService.cleanup_old_locations(days)
        click.echo("Deleted {} location pings older than {} days.".format(deleted, days))


def create_app(config_name=None):
    """Flask application factory"""
    app = Flask(__name__)

    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    from config import config
    app.config.from_object(config[config_name])

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    _init_sentry(app)

    # Initialize extensions
    db.init_app(app)
    limiter.init_app(app)
    CORS(app, resources={r"/api/*": {"origins": app.config['CORS_ORIGINS']}}, supports_credentials=True)

    from tourbook import models  # noqa: F401  (register tables on the metadata)
    from tourbook.routes import register_blueprints
    register_blueprints(app)

    @app.before_request
    def sanitize_json_input():
        """Escape HTML in string values of incoming JSON bodies."""
        if not request.is_json:
            return
        raw = request.get_json(silent=True)
        if raw is not None:
            sanitized = sanitize_dict(raw)
            # Replace the parsed JSON cache so handlers read clean values
            request._cached_json = (sanitized, sanitized)

    @app.after_request
    def set_security_headers(response):
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    _register_error_handlers(app)
    _register_cli(app)

    @app.route('/health')
    def health():
        return {'status': 'healthy', 'service': 'tourbook-backend'}, 200

    return app
