"""
Shared helpers used across blueprints.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from functools import wraps
from typing import Any

from flask import current_app, jsonify, request
from flask_login import current_user

from db_stores import UserProfileDB

logger = logging.getLogger(__name__)


def current_user_id() -> int:
    return current_user.id


def today() -> date:
    """Local calendar date; no timezone handling."""
    return date.today()


def json_body() -> dict:
    """Request JSON as a dict; an empty dict for anything else."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def error_response(message: str, status: int = 400, **extra: Any):
    return jsonify({"error": message, **extra}), status


def feature_enabled(name: str) -> bool:
    return bool(current_app.config.get("FEATURE_FLAGS", {}).get(name, False))


def require_feature(name: str) -> Callable:
    """404 the route when the feature flag is off."""
    def decorator(f: Callable) -> Callable:
        @wraps(f)
        def decorated(*args: Any, **kwargs: Any) -> Any:
            if not feature_enabled(name):
                return error_response("Not found", 404)
            return f(*args, **kwargs)
        return decorated
    return decorator


def load_profile_or_404():
    """The current user's profile, or an error response tuple."""
    profile = UserProfileDB.load(current_user_id())
    if profile is None:
        return None, error_response("No profile found", 404)
    return profile, None
