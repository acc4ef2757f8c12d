"""Profile and onboarding routes — schedule profile and semester roster."""

from __future__ import annotations

import logging
import sqlite3

from flask import Blueprint, jsonify
from flask_login import login_required

from audit import log_event
from helpers import current_user_id, error_response, json_body, load_profile_or_404
from profile_draft import draft_to_roster, draft_to_schedule, new_draft
from roster import RosterValidationError, is_duplicate_code, validate_roster

logger = logging.getLogger(__name__)

bp = Blueprint("profile", __name__)


@bp.route("/api/profile")
@login_required
def api_profile():
    profile, err = load_profile_or_404()
    if err:
        return err
    data = profile.to_dict()
    if not profile.onboarding_complete and profile.schedule is None:
        # Nothing saved yet: hand back the onboarding draft to start from
        data["draft"] = new_draft()
    return jsonify(data)


def _save_profile(complete_onboarding: bool):
    profile, err = load_profile_or_404()
    if err:
        return err

    data = json_body()
    if complete_onboarding and "semesters" not in data:
        return error_response("Error: No semester data found")

    try:
        profile.update(data, complete_onboarding=complete_onboarding)
    except RosterValidationError as e:
        return error_response(str(e), violations=[v.to_dict() for v in e.violations])
    except ValueError as e:
        return error_response(str(e))
    except sqlite3.Error:
        logger.exception("Error saving profile for user %s", profile.user_id)
        return error_response("Error updating profile", 500)

    log_event(
        "onboarding_complete" if complete_onboarding else "profile_update",
        profile.user_id,
        semesters=len(profile.semesters),
    )
    return jsonify(profile.to_dict())


@bp.route("/api/profile", methods=["PUT"])
@login_required
def api_profile_update():
    return _save_profile(complete_onboarding=False)


@bp.route("/api/onboarding", methods=["POST"])
@login_required
def api_onboarding():
    return _save_profile(complete_onboarding=True)


@bp.route("/api/profile/validate", methods=["POST"])
@login_required
def api_profile_validate():
    """Live validation of an edit draft: schedule fields, roster violations and per-field duplicate flags."""
    data = json_body()
    try:
        draft_to_schedule(data)
        semesters = draft_to_roster(data)
    except ValueError as e:
        return error_response(str(e))

    duplicates = []
    for sem_index, sem in enumerate(semesters):
        for sub_index, sub in enumerate(sem.subjects):
            if is_duplicate_code(sem, sub_index, sub.code):
                duplicates.append({"semesterIndex": sem_index, "subjectIndex": sub_index})

    violations = validate_roster(semesters)
    logger.debug("Validated roster for user %s: %d violation(s)", current_user_id(), len(violations))
    return jsonify({
        "valid": not violations,
        "violations": [v.to_dict() for v in violations],
        "duplicateFields": duplicates,
    })
