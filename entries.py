"""
Daily entries and hour records.

A DailyEntry is identified by (user_id, date) and is always written whole.
Its hours list holds at most one HourRecord per slot time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from schedule import ATTENDANCE_STATUSES, DAY_TYPES, PRODUCTIVITY_LEVELS


def entry_doc_id(user_id, day: date) -> str:
    """Storage key for a user's day, e.g. ``"7_2025-01-31"``."""
    return f"{user_id}_{day.isoformat()}"


@dataclass
class HourRecord:
    time: str
    subject: str = ""
    unit: Optional[int] = None
    attendance: Optional[str] = None
    activity: str = ""
    productivity_level: Optional[int] = None
    notes: str = ""

    def to_dict(self) -> dict:
        data: dict = {"time": self.time}
        if self.subject:
            data["subject"] = self.subject
        if self.unit is not None:
            data["unit"] = self.unit
        if self.attendance:
            data["attendance"] = self.attendance
        if self.activity:
            data["activity"] = self.activity
        if self.productivity_level is not None:
            data["productivityLevel"] = self.productivity_level
        if self.notes:
            data["notes"] = self.notes
        return data

    @classmethod
    def from_dict(cls, data: dict) -> HourRecord:
        time = data.get("time")
        if not time:
            raise ValueError("Hour record is missing its time")

        attendance = data.get("attendance") or None
        if attendance is not None and attendance not in ATTENDANCE_STATUSES:
            raise ValueError(f"{time}: unknown attendance status {attendance!r}")

        level = data.get("productivityLevel", data.get("productivity_level"))
        if level in ("", None):
            level = None
        else:
            try:
                level = int(level)
            except (TypeError, ValueError):
                raise ValueError(f"{time}: invalid productivity level {level!r}")
            if level not in PRODUCTIVITY_LEVELS:
                raise ValueError(f"{time}: productivity level must be one of 1, 2, 5, 10")

        unit = data.get("unit")
        if unit in ("", None):
            unit = None
        else:
            try:
                unit = int(unit)
            except (TypeError, ValueError):
                raise ValueError(f"{time}: invalid unit {unit!r}")

        def text(key: str) -> str:
            value = data.get(key)
            if value in ("", None):
                return ""
            if not isinstance(value, str):
                raise ValueError(f"{time}: {key} must be text")
            return value

        return cls(
            time=str(time),
            subject=text("subject"),
            unit=unit,
            attendance=attendance,
            activity=text("activity"),
            productivity_level=level,
            notes=text("notes"),
        )


@dataclass
class DailyEntry:
    user_id: int
    date: date
    day_type: str = "college"
    hours: list[HourRecord] = field(default_factory=list)
    daily_reflection: str = ""
    updated_at: str = ""

    @property
    def doc_id(self) -> str:
        return entry_doc_id(self.user_id, self.date)

    @property
    def hours_logged(self) -> int:
        return len(self.hours)

    def hour(self, time: str) -> Optional[HourRecord]:
        for h in self.hours:
            if h.time == time:
                return h
        return None

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "date": self.date.isoformat(),
            "dayType": self.day_type,
            "hours": [h.to_dict() for h in self.hours],
            "dailyReflection": self.daily_reflection,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, user_id: int, day: date, data: dict) -> DailyEntry:
        day_type = data.get("dayType") or data.get("day_type") or "college"
        if day_type not in DAY_TYPES:
            raise ValueError(f"Unknown day type: {day_type!r}")

        reflection = data.get("dailyReflection") or data.get("daily_reflection") or ""
        if not isinstance(reflection, str):
            raise ValueError("dailyReflection must be text")

        hours: list[HourRecord] = []
        for raw in data.get("hours") or []:
            if not isinstance(raw, dict):
                raise ValueError("Each hour record must be an object")
            hours = upsert_hour(hours, HourRecord.from_dict(raw))

        return cls(
            user_id=user_id,
            date=day,
            day_type=day_type,
            hours=hours,
            daily_reflection=reflection,
            updated_at=data.get("updatedAt") or data.get("updated_at") or "",
        )


def upsert_hour(hours: list[HourRecord], record: HourRecord) -> list[HourRecord]:
    """Return a new hours list with ``record`` replacing any record at its time."""
    replaced = False
    result = []
    for h in hours:
        if h.time == record.time:
            result.append(record)
            replaced = True
        else:
            result.append(h)
    if not replaced:
        result.append(record)
    return result


def set_day_type(entry: DailyEntry, day_type: str) -> DailyEntry:
    """Switch the entry's day type. Changing it discards the hour records."""
    if day_type not in DAY_TYPES:
        raise ValueError(f"Unknown day type: {day_type!r}")
    if day_type == entry.day_type:
        return entry
    return DailyEntry(
        user_id=entry.user_id,
        date=entry.date,
        day_type=day_type,
        hours=[],
        daily_reflection=entry.daily_reflection,
        updated_at=entry.updated_at,
    )


def parse_day(value: str) -> date:
    """Parse a ``yyyy-MM-dd`` path/query value."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValueError(f"Invalid date {value!r}, expected yyyy-MM-dd")
