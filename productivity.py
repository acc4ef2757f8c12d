"""Productivity Aggregator — normalized productivity index over day/week/month windows."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from fractions import Fraction
from typing import Iterable

from attendance import round_half_up
from entries import DailyEntry

WINDOWS = ("today", "week", "month")
MAX_PRODUCTIVITY_LEVEL = 10
RECENT_ACTIVITY_LIMIT = 5


@dataclass
class ProductivityStats:
    index: int
    hours_logged: int

    def to_dict(self) -> dict:
        return {"index": self.index, "hoursLogged": self.hours_logged}


def window_bounds(window: str, today: date) -> tuple[date, date]:
    """Inclusive date range of a window; weeks start on Monday."""
    if window == "today":
        return today, today
    if window == "week":
        start = today - timedelta(days=today.weekday())
        return start, start + timedelta(days=6)
    if window == "month":
        last_day = calendar.monthrange(today.year, today.month)[1]
        return today.replace(day=1), today.replace(day=last_day)
    raise ValueError(f"Unknown window: {window!r}")


def productivity_index(entries: Iterable[DailyEntry]) -> ProductivityStats:
    hours_logged = 0
    score = 0
    for entry in entries:
        for hour in entry.hours:
            hours_logged += 1
            if hour.productivity_level:
                score += hour.productivity_level

    if hours_logged == 0:
        return ProductivityStats(index=0, hours_logged=0)
    index = round_half_up(Fraction(100 * score, hours_logged * MAX_PRODUCTIVITY_LEVEL))
    return ProductivityStats(index=index, hours_logged=hours_logged)


def aggregate_productivity(entries: Iterable[DailyEntry], window: str, today: date) -> ProductivityStats:
    start, end = window_bounds(window, today)
    return productivity_index(e for e in entries if start <= e.date <= end)


def recent_activity(entries: Iterable[DailyEntry], limit: int = RECENT_ACTIVITY_LIMIT) -> list[DailyEntry]:
    """Latest entries by date across all history, newest first."""
    return sorted(entries, key=lambda e: e.date, reverse=True)[:limit]


def _reflection_preview(text: str, length: int = 100) -> str:
    if len(text) > length:
        return text[:length] + "..."
    return text


def dashboard_stats(entries: list[DailyEntry], today: date, recent_limit: int = RECENT_ACTIVITY_LIMIT) -> dict:
    """Everything the dashboard shows, computed from one snapshot."""
    day = aggregate_productivity(entries, "today", today)
    week = aggregate_productivity(entries, "week", today)
    month = aggregate_productivity(entries, "month", today)

    return {
        "todayProductivity": day.index,
        "weekProductivity": week.index,
        "monthProductivity": month.index,
        "todayHoursLogged": day.hours_logged,
        "weekHoursLogged": week.hours_logged,
        "recentActivities": [
            {
                "date": e.date.isoformat(),
                "dayType": e.day_type,
                "hoursLogged": e.hours_logged,
                "reflection": _reflection_preview(e.daily_reflection),
            }
            for e in recent_activity(entries, recent_limit)
        ],
    }
