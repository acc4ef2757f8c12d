"""Daily tracker routes — slots for a day and the day's hour records."""

from __future__ import annotations

import logging
import sqlite3

from flask import Blueprint, jsonify, request
from flask_login import login_required

from db_stores import DailyEntryDB
from entries import DailyEntry, parse_day
from helpers import current_user_id, error_response, json_body, load_profile_or_404
from roster import semester_for_date
from schedule import DAY_TYPES, generate_slots, subject_choices, validate_day

logger = logging.getLogger(__name__)

bp = Blueprint("tracker", __name__)

NO_SEMESTER_ADVISORY = (
    "No semester is active for this date. Please configure semester dates in Profile."
)


def _day_view(profile, entry: DailyEntry, day_type: str) -> dict:
    active = semester_for_date(profile.semesters, entry.date)
    slots = generate_slots(day_type, profile.schedule, active)
    return {
        "entry": entry.to_dict(),
        "slots": [s.to_dict() for s in slots],
        "activeSemester": active.to_dict() if active else None,
        "subjects": subject_choices(active),
        "advisory": None if active else NO_SEMESTER_ADVISORY,
        "activities": {
            "productive": profile.schedule.productive_activities if profile.schedule else [],
            "unproductive": profile.schedule.unproductive_activities if profile.schedule else [],
        },
    }


@bp.route("/api/tracker/<day>")
@login_required
def api_tracker_day(day: str):
    try:
        selected = parse_day(day)
    except ValueError as e:
        return error_response(str(e))

    profile, err = load_profile_or_404()
    if err:
        return err

    uid = current_user_id()
    try:
        entry = DailyEntryDB(uid).get(selected)
    except sqlite3.Error:
        logger.exception("Error loading day data for user %s", uid)
        return error_response("Error loading day data", 500)

    if entry is None:
        entry = DailyEntry(user_id=uid, date=selected)
    return jsonify(_day_view(profile, entry, entry.day_type))


@bp.route("/api/tracker/<day>/slots")
@login_required
def api_tracker_slots(day: str):
    """Slots for a day type without loading the stored entry."""
    try:
        selected = parse_day(day)
    except ValueError as e:
        return error_response(str(e))
    day_type = request.args.get("dayType", "college")
    if day_type not in DAY_TYPES:
        return error_response(f"Unknown day type: {day_type!r}")

    profile, err = load_profile_or_404()
    if err:
        return err
    entry = DailyEntry(user_id=current_user_id(), date=selected, day_type=day_type)
    return jsonify(_day_view(profile, entry, day_type))


@bp.route("/api/tracker/<day>", methods=["PUT"])
@login_required
def api_tracker_save(day: str):
    try:
        selected = parse_day(day)
        entry = DailyEntry.from_dict(current_user_id(), selected, json_body())
    except ValueError as e:
        return error_response(str(e))

    profile, err = load_profile_or_404()
    if err:
        return err

    errors = validate_day(entry.day_type, profile.schedule, entry.hours)
    if errors:
        return error_response("Invalid hour records", errors=errors)

    try:
        DailyEntryDB(entry.user_id).put(entry)
    except sqlite3.Error:
        logger.exception("Error saving data for user %s", entry.user_id)
        return error_response("Error saving data", 500)

    logger.info("Saved %s (%d hours)", entry.doc_id, entry.hours_logged)
    return jsonify({"ok": True, "entry": entry.to_dict()})
