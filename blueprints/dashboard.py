"""Dashboard routes — productivity index and recent activity."""

from __future__ import annotations

import logging
import sqlite3

from flask import Blueprint, current_app, jsonify, request
from flask_login import login_required

from db_stores import DailyEntryDB
from helpers import current_user_id, error_response, today
from productivity import WINDOWS, aggregate_productivity, dashboard_stats

logger = logging.getLogger(__name__)

bp = Blueprint("dashboard", __name__)


@bp.route("/api/dashboard")
@login_required
def api_dashboard():
    uid = current_user_id()
    try:
        entries = DailyEntryDB(uid).all()
    except sqlite3.Error:
        logger.exception("Error loading stats for user %s", uid)
        return error_response("Error loading stats", 500)

    limit = current_app.config.get("RECENT_ACTIVITY_LIMIT", 5)
    return jsonify(dashboard_stats(entries, today(), recent_limit=limit))


@bp.route("/api/productivity")
@login_required
def api_productivity():
    window = request.args.get("window", "today")
    if window not in WINDOWS:
        return error_response(f"Unknown window: {window!r}")

    uid = current_user_id()
    try:
        entries = DailyEntryDB(uid).all()
    except sqlite3.Error:
        logger.exception("Error loading stats for user %s", uid)
        return error_response("Error loading stats", 500)

    stats = aggregate_productivity(entries, window, today())
    return jsonify({"window": window, **stats.to_dict()})
