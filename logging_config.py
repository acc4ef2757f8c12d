"""
Structured logging configuration.

- JSON format for production (machine-parseable)
- Human-readable text for development
- Every record inside a request carries its request id and signed-in user id
- Access logging via after_request handler
"""

from __future__ import annotations

import json
import logging
import time
import uuid

from flask import Flask, g, has_request_context, request
from flask_login import current_user


class JSONFormatter(logging.Formatter):
    """Emit log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in ("request_id", "user_id"):
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class RequestContextFilter(logging.Filter):
    """Attach request_id / user_id to records emitted while handling a request."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not has_request_context():
            return True
        if not hasattr(record, "request_id"):
            record.request_id = g.get("request_id")
        if not hasattr(record, "user_id"):
            record.user_id = _signed_in_user_id()
        return True


def _signed_in_user_id():
    # current_user is only resolved once flask-login has loaded it for this request
    if "_login_user" not in g:
        return None
    return getattr(current_user, "id", None)


def init_logging(app: Flask) -> None:
    """Configure logging based on app config."""
    log_format = app.config.get("LOG_FORMAT", "text")
    log_level = app.config.get("LOG_LEVEL", "INFO")

    root = logging.getLogger()
    root.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.addFilter(RequestContextFilter())
    if log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
    root.addHandler(handler)

    # Quiet noisy libraries
    logging.getLogger("werkzeug").setLevel(logging.WARNING)

    @app.before_request
    def _attach_request_id():
        g.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        g.request_start = time.time()

    @app.after_request
    def _log_request(response):
        duration_ms = (time.time() - g.get("request_start", time.time())) * 1000
        if request.path != "/healthz":
            app.logger.info(
                "%s %s %s %.0fms",
                request.method,
                request.path,
                response.status_code,
                duration_ms,
            )
        response.headers["X-Request-ID"] = g.get("request_id", "")
        return response
