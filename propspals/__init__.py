import logging
import os

import redis
from flask import Flask, jsonify, request
from flask_caching import Cache
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from flask_wtf.csrf import CSRFProtect
from werkzeug.exceptions import HTTPException

from config import config

logger = logging.getLogger(__name__)

db = SQLAlchemy()
cache = Cache()
migrate = Migrate()
csrf = CSRFProtect()


def get_real_ip():
    """
    Get the real client IP address, accounting for reverse proxies.
    Checks X-Forwarded-For, X-Real-IP, and falls back to remote_addr.
    """
    # X-Forwarded-For: client, proxy1, proxy2, ...
    if request.headers.get("X-Forwarded-For"):
        return request.headers.get("X-Forwarded-For").split(",")[0].strip()
    if request.headers.get("X-Real-IP"):
        return request.headers.get("X-Real-IP")
    return get_remote_address()


# Use Redis in production for shared rate limiting across multiple workers
limiter_storage_uri = "memory://"
redis_url = os.environ.get("REDIS_URL") or os.environ.get("CACHE_REDIS_URL")
if redis_url:
    try:
        redis_client = redis.Redis.from_url(redis_url)
        redis_client.ping()
        limiter_storage_uri = redis_url
        logger.info(f"Rate limiter using Redis storage at {redis_url}")
    except redis.exceptions.ConnectionError as e:
        logger.warning(f"Redis not available for rate limiter, using memory storage: {e}")

limiter = Limiter(
    key_func=get_real_ip,
    default_limits=["10000 per day", "1000 per hour"],
    storage_uri=limiter_storage_uri,
)


def create_app(config_name=None):
    app = Flask(__name__)

    if config_name is None:
        config_name = os.environ.get("FLASK_CONFIG", "default")

    app.config.from_object(config[config_name]())

    # The session cookie carries pool secrets, keep it away from scripts
    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
    app.config["SESSION_COOKIE_HTTPONLY"] = True
    app.config["SESSION_COOKIE_SECURE"] = (
        False
        if app.config.get("DEBUG") or app.config.get("TESTING")
        else app.config.get("FLASK_ENV") == "production"
    )
    app.config["PERMANENT_SESSION_LIFETIME"] = 60 * 60 * 24 * 90  # 90 days

    db.init_app(app)
    cache.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)
    limiter.init_app(app)

    from propspals.routes.pools import bp as pools_bp

    app.register_blueprint(pools_bp, url_prefix="/api/pools")

    from propspals.routes.props import bp as props_bp

    app.register_blueprint(props_bp, url_prefix="/api/pools")

    # JSON API authenticates with pool secrets, not CSRF tokens
    csrf.exempt(pools_bp)
    csrf.exempt(props_bp)

    register_error_handlers(app)

    from propspals.utils.logging_config import setup_logging

    setup_logging(app)

    with app.app_context():
        db.create_all()

    return app


def register_error_handlers(app):
    """Register global error handlers"""
    from propspals.errors import ApiError

    @app.after_request
    def after_request(response):
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if request.path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-store"
        if not app.config.get("DEBUG") and not app.config.get("TESTING"):
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return response

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        # Client errors are expected outcomes, not failures
        db.session.rollback()
        logger.debug(f"{error.code} on {request.method} {request.path}: {error.message}")
        return jsonify(error.to_dict()), error.status

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({"code": "NOT_FOUND", "message": "Resource not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        return (
            jsonify({"code": "METHOD_NOT_ALLOWED", "message": "Method not allowed"}),
            405,
        )

    @app.errorhandler(429)
    def too_many_requests_error(error):
        return (
            jsonify({"code": "RATE_LIMITED", "message": "Too many requests"}),
            429,
        )

    @app.errorhandler(Exception)
    def internal_error(error):
        if isinstance(error, HTTPException):
            return (
                jsonify({"code": error.name.upper().replace(" ", "_"), "message": error.description}),
                error.code,
            )
        db.session.rollback()
        app.logger.exception(
            f"Unhandled error on {request.method} {request.path}: {error}"
        )
        return (
            jsonify({"code": "INTERNAL_ERROR", "message": "Internal server error"}),
            500,
        )


from propspals import models  # noqa: F401, E402 - imported for model registration
