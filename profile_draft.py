"""
Profile / onboarding edit draft.

The draft is a plain JSON-serializable dict in the stored profile shape
(camelCase keys, nested semesters → subjects → units). Every reducer returns
a new draft and leaves its input untouched, so a draft can be round-tripped
through a session or request body between edits.

The reducers are the edit API for clients building a draft step by step.
The server hands out blank drafts from ``GET /api/profile`` (``new_draft``)
and checks finished ones in ``POST /api/profile/validate``
(``draft_to_schedule`` and ``draft_to_roster``).
"""

from __future__ import annotations

import copy
from typing import Any

from roster import Semester, Subject
from schedule import ScheduleProfile

LIST_FIELDS = ("productiveActivities", "unproductiveActivities")


def new_draft() -> dict:
    """Blank onboarding draft: schedule defaults plus one semester with one subject."""
    draft = ScheduleProfile.onboarding_defaults().to_dict()
    draft["semesters"] = [_blank_semester(1)]
    return draft


def _blank_semester(number: int) -> dict:
    return {
        "semesterNumber": number,
        "startDate": "",
        "endDate": "",
        "subjects": [Subject.blank().to_dict()],
    }


def set_field(draft: dict, key: str, value: Any) -> dict:
    new = copy.deepcopy(draft)
    new[key] = value
    return new


def set_list_item(draft: dict, key: str, index: int, value: str) -> dict:
    new = copy.deepcopy(draft)
    items = new.setdefault(key, [])
    items[index] = value
    return new


def add_list_item(draft: dict, key: str) -> dict:
    new = copy.deepcopy(draft)
    new.setdefault(key, []).append("")
    return new


def remove_list_item(draft: dict, key: str, index: int) -> dict:
    """Drop one entry; the last remaining entry is kept."""
    items = draft.get(key) or []
    if len(items) <= 1:
        return copy.deepcopy(draft)
    new = copy.deepcopy(draft)
    del new[key][index]
    return new


def set_semester_field(draft: dict, sem_index: int, key: str, value: Any) -> dict:
    new = copy.deepcopy(draft)
    new["semesters"][sem_index][key] = value
    return new


def add_semester(draft: dict) -> dict:
    new = copy.deepcopy(draft)
    semesters = new.setdefault("semesters", [])
    next_number = max((s.get("semesterNumber", 0) for s in semesters), default=0) + 1
    semesters.append(_blank_semester(min(next_number, 8)))
    return new


def remove_semester(draft: dict, sem_index: int) -> dict:
    new = copy.deepcopy(draft)
    del new["semesters"][sem_index]
    return new


def set_subject_field(draft: dict, sem_index: int, sub_index: int, key: str, value: Any) -> dict:
    new = copy.deepcopy(draft)
    new["semesters"][sem_index]["subjects"][sub_index][key] = value
    return new


def add_subject(draft: dict, sem_index: int) -> dict:
    new = copy.deepcopy(draft)
    new["semesters"][sem_index]["subjects"].append(Subject.blank().to_dict())
    return new


def remove_subject(draft: dict, sem_index: int, sub_index: int) -> dict:
    """Drop a subject; a semester always keeps at least one."""
    subjects = draft["semesters"][sem_index]["subjects"]
    if len(subjects) <= 1:
        return copy.deepcopy(draft)
    new = copy.deepcopy(draft)
    del new["semesters"][sem_index]["subjects"][sub_index]
    return new


def set_unit_field(draft: dict, sem_index: int, sub_index: int, unit_index: int, key: str, value: Any) -> dict:
    new = copy.deepcopy(draft)
    new["semesters"][sem_index]["subjects"][sub_index]["units"][unit_index][key] = value
    return new


def draft_to_roster(draft: dict) -> list[Semester]:
    return [Semester.from_dict(s) for s in draft.get("semesters") or []]


def draft_to_schedule(draft: dict) -> ScheduleProfile:
    return ScheduleProfile.from_dict(draft)
