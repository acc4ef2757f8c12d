"""Reminders and tasks with deadlines."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

REMINDER_PERIODS = (0, 1, 2, 3, 7)  # days before the deadline
FILTERS = ("all", "active", "completed")


@dataclass
class Reminder:
    id: str
    user_id: int
    name: str
    deadline: date
    description: str = ""
    duration: str = ""  # hours, free text
    reminder_period: int = 1
    completed: bool = False
    completed_at: Optional[str] = None
    created_at: str = ""

    def to_dict(self, today: Optional[date] = None) -> dict:
        data = {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "description": self.description,
            "duration": self.duration,
            "deadline": self.deadline.isoformat(),
            "reminderPeriod": self.reminder_period,
            "completed": self.completed,
            "completedAt": self.completed_at,
        }
        if today is not None:
            data["status"] = deadline_status(self.deadline, today)
        return data


def parse_reminder_fields(data: dict) -> dict:
    """Validate a create/update payload into Reminder keyword arguments."""
    name = (data.get("name") or "").strip()
    if not name:
        raise ValueError("Reminder name is required")

    raw_deadline = data.get("deadline")
    try:
        deadline = date.fromisoformat(str(raw_deadline)[:10])
    except ValueError:
        raise ValueError(f"Invalid deadline: {raw_deadline!r}")

    try:
        period = int(data.get("reminderPeriod", 1))
    except (TypeError, ValueError):
        raise ValueError("Reminder period must be a number of days")
    if period not in REMINDER_PERIODS:
        raise ValueError("Reminder period must be one of 0, 1, 2, 3, 7 days")

    duration = data.get("duration")
    return {
        "name": name,
        "description": data.get("description") or "",
        "duration": "" if duration is None else str(duration),
        "deadline": deadline,
        "reminder_period": period,
    }


def deadline_status(deadline: date, today: date) -> str:
    if deadline < today:
        return "overdue"
    if deadline == today:
        return "today"
    return "upcoming"


def filter_reminders(reminders: list[Reminder], which: str = "all") -> list[Reminder]:
    if which == "active":
        return [r for r in reminders if not r.completed]
    if which == "completed":
        return [r for r in reminders if r.completed]
    return list(reminders)


def reminder_counts(reminders: list[Reminder]) -> dict:
    completed = sum(1 for r in reminders if r.completed)
    return {
        "all": len(reminders),
        "active": len(reminders) - completed,
        "completed": completed,
    }
