"""
Daily schedule profile and hour-slot generation.

The slot generator decides, for a given day type, which hour slots exist and
what kind of data each one collects. It is a pure function of the schedule
profile: missing times simply drop the dependent segment.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Optional

DAY_TYPES = ("college", "non-college")
RESIDENCE_TYPES = ("day-scholar", "hosteller")
ATTENDANCE_STATUSES = ("present", "absent", "onduty", "cancelled")
PRODUCTIVITY_LEVELS = (1, 2, 5, 10)

DEFAULT_BUS_TO_COLLEGE = "06:45"
DEFAULT_BUS_RETURN = "15:50"

# Fixed academic timetable. Not derived from college_start/college_end.
COLLEGE_TIMETABLE: list[tuple[str, str]] = [
    ("08:00", "1st Hour"),
    ("08:45", "2nd Hour"),
    ("09:30", "Break"),
    ("09:50", "3rd Hour"),
    ("10:35", "4th Hour"),
    ("11:20", "5th Hour"),
    ("12:05", "Lunch Break"),
    ("13:05", "6th Hour"),
    ("13:50", "7th Hour"),
    ("14:35", "8th Hour"),
]

# camelCase keys used by the stored profile document
_PROFILE_KEYS = {
    "wake_up_time": "wakeUpTime",
    "usual_sleep_time": "usualSleepTime",
    "college_start": "collegeStart",
    "college_end": "collegeEnd",
    "active_evening_start": "activeEveningStart",
    "active_evening_end": "activeEveningEnd",
    "prep_time_start": "prepTimeStart",
    "prep_time_end": "prepTimeEnd",
    "refresh_time_start": "refreshTimeStart",
    "refresh_time_end": "refreshTimeEnd",
    "bus_to_college_start": "busToCollegeStart",
    "bus_to_college_end": "busToCollegeEnd",
    "bus_return_start": "busReturnStart",
    "bus_return_end": "busReturnEnd",
    "residence_type": "residenceType",
    "enable_health_metrics": "enableHealthMetrics",
    "productive_activities": "productiveActivities",
    "unproductive_activities": "unproductiveActivities",
}


@dataclass
class ScheduleProfile:
    """A user's daily time-block configuration. Times are "HH:MM" or ""."""

    wake_up_time: str = ""
    usual_sleep_time: str = ""
    college_start: str = ""
    college_end: str = ""
    active_evening_start: str = ""
    active_evening_end: str = ""
    prep_time_start: str = ""
    prep_time_end: str = ""
    refresh_time_start: str = ""
    refresh_time_end: str = ""
    bus_to_college_start: str = ""
    bus_to_college_end: str = ""
    bus_return_start: str = ""
    bus_return_end: str = ""
    residence_type: str = "day-scholar"
    enable_health_metrics: bool = False
    productive_activities: list[str] = field(default_factory=list)
    unproductive_activities: list[str] = field(default_factory=list)

    @classmethod
    def onboarding_defaults(cls) -> ScheduleProfile:
        return cls(
            wake_up_time="04:00",
            usual_sleep_time="23:00",
            college_start="08:00",
            college_end="15:40",
            active_evening_start="18:00",
            active_evening_end="22:00",
            prep_time_start="05:00",
            prep_time_end="06:45",
            refresh_time_start="17:10",
            refresh_time_end="18:00",
            bus_to_college_start="06:45",
            bus_to_college_end="07:45",
            bus_return_start="15:50",
            bus_return_end="17:10",
            productive_activities=[""],
            unproductive_activities=[""],
        )

    @property
    def is_day_scholar(self) -> bool:
        return self.residence_type == "day-scholar"

    def to_dict(self) -> dict:
        data = asdict(self)
        return {_PROFILE_KEYS[k]: v for k, v in data.items()}

    @classmethod
    def from_dict(cls, data: dict) -> ScheduleProfile:
        kwargs = {}
        for attr, key in _PROFILE_KEYS.items():
            if key in data:
                kwargs[attr] = data[key]
            elif attr in data:
                kwargs[attr] = data[attr]

        residence = kwargs.get("residence_type") or "day-scholar"
        if residence not in RESIDENCE_TYPES:
            raise ValueError(f"Unknown residence type: {residence!r}")
        kwargs["residence_type"] = residence

        for attr in ("productive_activities", "unproductive_activities"):
            values = kwargs.get(attr) or []
            if not isinstance(values, list):
                raise ValueError(f"{_PROFILE_KEYS[attr]} must be a list")
            kwargs[attr] = [str(v) for v in values]

        kwargs["enable_health_metrics"] = bool(kwargs.get("enable_health_metrics", False))
        for attr in _PROFILE_KEYS:
            if attr.endswith(("_time", "_start", "_end")) and kwargs.get(attr) is None:
                kwargs[attr] = ""
        return cls(**kwargs)


@dataclass
class Slot:
    time: str
    label: str
    kind: str  # pre-college | bus-to-college | college-hour | break | bus-return | evening | regular

    @property
    def collects_data(self) -> bool:
        return self.kind != "break"

    def to_dict(self) -> dict:
        return {"time": self.time, "label": self.label, "kind": self.kind}


def parse_hour(value: Optional[str]) -> Optional[int]:
    """Hour component of an "HH:MM" string, or None when unset/garbled."""
    if not value:
        return None
    try:
        return int(value.split(":")[0])
    except ValueError:
        return None


def format_hour_label(hour: int) -> str:
    # Hour 12 reads "12:00 PM" and hour 0 reads "0:00 AM"; kept as-is.
    display = hour - 12 if hour > 12 else hour
    suffix = "AM" if hour < 12 else "PM"
    return f"{display}:00 {suffix}"


def _hour_slot(hour: int, kind: str) -> Slot:
    return Slot(time=f"{hour:02d}:00", label=format_hour_label(hour), kind=kind)


def _timetable_kind(label: str) -> str:
    if "Break" in label or "Lunch" in label:
        return "break"
    return "college-hour"


def generate_slots(day_type: str, profile: Optional[ScheduleProfile], active_semester=None) -> list[Slot]:
    """Ordered slots for a day of the given type.

    ``active_semester`` does not change the slot list; callers pass it so the
    college-hour slots can offer that semester's subjects.
    """
    if profile is None:
        profile = ScheduleProfile()

    if day_type == "college":
        return _college_slots(profile)
    return _non_college_slots(profile)


def _college_slots(profile: ScheduleProfile) -> list[Slot]:
    slots: list[Slot] = []

    wake = parse_hour(profile.wake_up_time)
    prep = parse_hour(profile.prep_time_start)
    if wake is not None and prep is not None:
        for hour in range(wake, prep):
            slots.append(_hour_slot(hour, "pre-college"))

    if profile.is_day_scholar:
        slots.append(Slot(
            time=profile.bus_to_college_start or DEFAULT_BUS_TO_COLLEGE,
            label="Bus to College",
            kind="bus-to-college",
        ))

    for time, label in COLLEGE_TIMETABLE:
        slots.append(Slot(time=time, label=label, kind=_timetable_kind(label)))

    if profile.is_day_scholar:
        slots.append(Slot(
            time=profile.bus_return_start or DEFAULT_BUS_RETURN,
            label="Bus Return",
            kind="bus-return",
        ))

    start = parse_hour(profile.active_evening_start)
    end = parse_hour(profile.active_evening_end)
    if start is not None and end is not None:
        for hour in range(start, end + 1):
            slots.append(_hour_slot(hour, "evening"))

    return slots


def _non_college_slots(profile: ScheduleProfile) -> list[Slot]:
    wake = parse_hour(profile.wake_up_time)
    sleep = parse_hour(profile.usual_sleep_time)
    if wake is None or sleep is None:
        return []

    slots = []
    hour = wake
    while hour <= 23:
        slots.append(_hour_slot(hour, "regular"))
        if hour == sleep:
            break
        hour += 1
    return slots


# ── Slot / record legality ─────────────────────────────────────────


def subject_choices(active_semester) -> list[dict]:
    """Subjects selectable in a college-hour slot; empty without a semester."""
    if active_semester is None:
        return []
    return [
        {
            "code": s.code,
            "name": s.name,
            "courseType": s.course_type,
            "units": [{"number": u.number, "name": u.name} for u in s.units]
            if s.course_type != "practical" else [],
        }
        for s in active_semester.subjects
    ]


def apply_subject_choice(record, code: str):
    """Set the subject on a college-hour record, defaulting attendance once."""
    record.subject = code
    if not record.attendance:
        record.attendance = "present"
    return record


def validate_hour_record(slot_kind: str, record) -> list[str]:
    """Return the problems with storing ``record`` in a slot of ``slot_kind``."""
    errors: list[str] = []
    if slot_kind == "break":
        return [f"{record.time}: break slots do not collect data"]

    if slot_kind == "college-hour":
        if not (record.subject or "").strip():
            errors.append(f"{record.time}: please select a subject for this hour")
        if not record.attendance:
            errors.append(f"{record.time}: attendance is required")
        elif record.attendance not in ATTENDANCE_STATUSES:
            errors.append(f"{record.time}: unknown attendance status {record.attendance!r}")
        return errors

    if record.subject or record.attendance:
        errors.append(f"{record.time}: subject and attendance only apply to college hours")
    if record.productivity_level is not None and record.productivity_level not in PRODUCTIVITY_LEVELS:
        errors.append(f"{record.time}: productivity level must be one of 1, 2, 5, 10")
    return errors


def validate_day(day_type: str, profile: Optional[ScheduleProfile], hours: list) -> list[str]:
    """Check every record of a day against the slot it belongs to.

    Records whose time matches no generated slot are rejected. When two
    slots share a time (a pre-college hour running past 08:00), the later
    slot in the day's order decides what the record may hold.
    """
    kinds = {s.time: s.kind for s in generate_slots(day_type, profile)}
    errors: list[str] = []
    for record in hours:
        kind = kinds.get(record.time)
        if kind is None:
            errors.append(f"{record.time}: no such slot on a {day_type} day")
            continue
        errors.extend(validate_hour_record(kind, record))
    return errors
