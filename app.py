"""
Personal OS Tracker — Flask Web Application

JSON API over the daily hour tracker, attendance and productivity analytics,
health metrics and reminders.
"""

from __future__ import annotations

import os
from typing import Any

from flask import Flask, Response, jsonify

import database
from auth import auth_bp, login_manager
from blueprints import register_blueprints
from extensions import limiter


def create_app(test_config: dict[str, Any] | None = None) -> Flask:
    app = Flask(__name__)

    # Load config
    from config import config_by_name
    env = os.environ.get("FLASK_ENV", "development")
    cfg = config_by_name.get(env, config_by_name["development"])
    app.config.from_object(cfg)
    if test_config is not None:
        app.config.update(test_config)
    elif hasattr(cfg, "validate"):
        cfg.validate()

    # Structured logging
    from logging_config import init_logging
    init_logging(app)

    # Register database teardown
    database.init_app(app)

    # Rate limiter (disabled in testing)
    limiter.init_app(app)
    if app.config.get("TESTING"):
        limiter.enabled = False

    # Register auth blueprint and login manager
    app.register_blueprint(auth_bp)
    login_manager.init_app(app)

    # Register all application blueprints
    register_blueprints(app)

    @app.route("/healthz")
    def healthz():
        return jsonify({"status": "ok"})

    # Security headers
    @app.after_request
    def set_security_headers(response: Response) -> Response:
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "SAMEORIGIN"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if not app.debug:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    return app


if __name__ == "__main__":
    create_app().run(debug=True, port=5001)
