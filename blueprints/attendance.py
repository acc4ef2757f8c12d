"""Attendance routes — per-subject attendance for a semester."""

from __future__ import annotations

import logging
import sqlite3

from flask import Blueprint, jsonify, request
from flask_login import login_required

from attendance import ATTENDANCE_THRESHOLD, aggregate_attendance, filter_subject
from db_stores import DailyEntryDB
from helpers import current_user_id, error_response, load_profile_or_404, today
from roster import resolve_semester

logger = logging.getLogger(__name__)

bp = Blueprint("attendance", __name__)


@bp.route("/api/attendance")
@login_required
def api_attendance():
    profile, err = load_profile_or_404()
    if err:
        return err

    selector = request.args.get("semester", "current")
    subject_code = request.args.get("subject", "all")

    semester = resolve_semester(selector, profile.semesters, today())
    semesters = [
        {
            "semesterNumber": s.semester_number,
            "startDate": s.start_date.isoformat() if s.start_date else "",
            "endDate": s.end_date.isoformat() if s.end_date else "",
        }
        for s in profile.semesters
    ]
    if semester is None:
        return jsonify({
            "semester": None, "semesters": semesters, "subjects": [], "threshold": ATTENDANCE_THRESHOLD,
        })

    uid = current_user_id()
    try:
        entries = DailyEntryDB(uid).all()
    except sqlite3.Error:
        logger.exception("Error loading attendance for user %s", uid)
        return error_response("Error loading attendance", 500)

    stats = aggregate_attendance(semester, entries)
    selected = filter_subject(stats, subject_code)

    subjects = []
    for s in selected:
        data = s.to_dict()
        # Class history is only shown for a single selected subject
        if subject_code == "all":
            data.pop("classes")
        subjects.append(data)

    return jsonify({
        "semester": semester.to_dict(),
        "semesters": semesters,
        "subjects": subjects,
        "threshold": ATTENDANCE_THRESHOLD,
    })
