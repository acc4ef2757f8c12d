"""Reminder routes — deadlines and tasks."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_login import login_required

from audit import log_event
from db_stores import ReminderStoreDB
from helpers import current_user_id, error_response, json_body, require_feature, today
from reminders import FILTERS, filter_reminders, parse_reminder_fields, reminder_counts

bp = Blueprint("reminders", __name__)


@bp.route("/api/reminders")
@login_required
@require_feature("reminders")
def api_reminders():
    which = request.args.get("filter", "all")
    if which not in FILTERS:
        return error_response(f"Unknown filter: {which!r}")

    reminders = ReminderStoreDB(current_user_id()).reminders
    now = today()
    return jsonify({
        "reminders": [r.to_dict(now) for r in filter_reminders(reminders, which)],
        "counts": reminder_counts(reminders),
    })


@bp.route("/api/reminders", methods=["POST"])
@login_required
@require_feature("reminders")
def api_reminder_create():
    try:
        fields = parse_reminder_fields(json_body())
    except ValueError as e:
        return error_response(str(e))
    reminder = ReminderStoreDB(current_user_id()).create(**fields)
    return jsonify(reminder.to_dict(today())), 201


@bp.route("/api/reminders/<reminder_id>", methods=["PUT"])
@login_required
@require_feature("reminders")
def api_reminder_update(reminder_id: str):
    try:
        fields = parse_reminder_fields(json_body())
    except ValueError as e:
        return error_response(str(e))
    reminder = ReminderStoreDB(current_user_id()).update(reminder_id, **fields)
    if reminder is None:
        return error_response("Reminder not found", 404)
    return jsonify(reminder.to_dict(today()))


@bp.route("/api/reminders/<reminder_id>", methods=["DELETE"])
@login_required
@require_feature("reminders")
def api_reminder_delete(reminder_id: str):
    uid = current_user_id()
    if not ReminderStoreDB(uid).delete(reminder_id):
        return error_response("Reminder not found", 404)
    log_event("reminder_deleted", uid, reminder=reminder_id)
    return jsonify({"ok": True})


@bp.route("/api/reminders/<reminder_id>/toggle", methods=["POST"])
@login_required
@require_feature("reminders")
def api_reminder_toggle(reminder_id: str):
    reminder = ReminderStoreDB(current_user_id()).toggle(reminder_id)
    if reminder is None:
        return error_response("Reminder not found", 404)
    return jsonify(reminder.to_dict(today()))
