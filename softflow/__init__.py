# softflow/__init__.py
from __future__ import annotations

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from .settings import Config
from .extensions import db, migrate, login_manager, limiter
from .validation import ApiValidationError


def create_app(config_object=None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_object or Config)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    hops = app.config.get("TRUST_PROXY_HOPS", 0)
    if hops:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops)

    # ======================
    # Initialize Extensions
    # ======================
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    limiter.init_app(app)

    # ======================
    # Import Models (CRITICAL)
    # ======================
    from . import models  # noqa: F401

    # ======================
    # Register Blueprints
    # ======================
    from .routes import main
    from .auth import auth
    from .admin import admin_bp
    from .public import public

    app.register_blueprint(main)
    app.register_blueprint(auth)
    app.register_blueprint(admin_bp)
    app.register_blueprint(public)

    from .cli import register_commands
    register_commands(app)

    # ======================
    # JSON errors
    # ======================
    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"message": "Not authenticated"}), 401

    @app.errorhandler(ApiValidationError)
    def validation_error(e):
        return jsonify(e.to_dict()), 400

    @app.errorhandler(429)
    def ratelimit_handler(e):
        return jsonify({"message": "Too many requests. Please try again later."}), 429

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify({"message": e.description or e.name}), e.code

    @app.errorhandler(Exception)
    def internal_error(e):
        db.session.rollback()
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"message": "Internal server error"}), 500

    return app
