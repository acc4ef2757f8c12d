"""Health metric routes."""

from __future__ import annotations

import logging
import sqlite3
from functools import wraps

from flask import Blueprint, current_app, jsonify
from flask_login import login_required

from db_stores import HealthMetricsDB
from entries import parse_day
from health import HealthMetricEntry, health_averages
from helpers import current_user_id, error_response, json_body, load_profile_or_404, require_feature

logger = logging.getLogger(__name__)

bp = Blueprint("health", __name__)


def profile_opt_in(f):
    """403 unless the user switched health tracking on in their profile."""
    @wraps(f)
    def decorated(*args, **kwargs):
        profile, err = load_profile_or_404()
        if err:
            return err
        if not (profile.schedule and profile.schedule.enable_health_metrics):
            return error_response("Health metrics are disabled in your profile", 403)
        return f(*args, **kwargs)
    return decorated


@bp.route("/api/health/<day>")
@login_required
@require_feature("health_metrics")
@profile_opt_in
def api_health_day(day: str):
    try:
        selected = parse_day(day)
    except ValueError as e:
        return error_response(str(e))

    uid = current_user_id()
    entry = HealthMetricsDB(uid).get(selected) or HealthMetricEntry(user_id=uid, date=selected)
    return jsonify(entry.to_dict())


@bp.route("/api/health/<day>", methods=["PUT"])
@login_required
@require_feature("health_metrics")
@profile_opt_in
def api_health_save(day: str):
    try:
        selected = parse_day(day)
    except ValueError as e:
        return error_response(str(e))

    uid = current_user_id()
    entry = HealthMetricEntry.from_dict(uid, selected, json_body())
    try:
        HealthMetricsDB(uid).put(entry)
    except sqlite3.Error:
        logger.exception("Error saving metrics for user %s", uid)
        return error_response("Error saving metrics", 500)
    return jsonify({"ok": True, "entry": entry.to_dict()})


@bp.route("/api/health/history")
@login_required
@require_feature("health_metrics")
@profile_opt_in
def api_health_history():
    days = current_app.config.get("HEALTH_HISTORY_DAYS", 7)
    history = HealthMetricsDB(current_user_id()).history(days)
    return jsonify({
        "history": [e.to_dict() for e in history],
        "averages": health_averages(history),
    })
