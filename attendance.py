"""
Attendance Aggregator — per-subject attendance statistics for a semester.

Turns raw hour records into per-subject counters, percentages, class history
and a shortfall projection against the 75% attendance requirement. Only
subjects currently on the semester's roster are reported: history logged
against a subject that was later removed is ignored, not deleted.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from fractions import Fraction
from typing import Iterable, Optional

from entries import DailyEntry
from roster import Semester

ATTENDANCE_THRESHOLD = 75
WARNING_THRESHOLD = 65

# A college-hour record with no attendance value counts as present.
DEFAULT_ATTENDANCE = "present"


def round_half_up(value: Fraction | float) -> int:
    """Round to the nearest integer with halves going up (12.5 -> 13)."""
    return math.floor(Fraction(value) + Fraction(1, 2))


@dataclass
class ClassRecord:
    date: date
    time: str
    attendance: str
    unit: Optional[int] = None
    notes: str = ""

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "time": self.time,
            "attendance": self.attendance,
            "unit": self.unit,
            "notes": self.notes,
        }


@dataclass
class SubjectStats:
    code: str
    name: str
    faculty: str = ""
    course_type: str = "theory"
    present: int = 0
    absent: int = 0
    onduty: int = 0
    cancelled: int = 0
    total: int = 0
    percentage: int = 0
    classes_needed: Optional[int] = None
    classes: list[ClassRecord] = field(default_factory=list)

    @property
    def attended(self) -> int:
        return self.present + self.onduty

    @property
    def band(self) -> str:
        return attendance_band(self.percentage)

    def record(self, status: str) -> None:
        self.total += 1
        setattr(self, status, getattr(self, status) + 1)

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "name": self.name,
            "faculty": self.faculty,
            "courseType": self.course_type,
            "present": self.present,
            "absent": self.absent,
            "onduty": self.onduty,
            "cancelled": self.cancelled,
            "total": self.total,
            "percentage": self.percentage,
            "classesNeeded": self.classes_needed,
            "band": self.band,
            "classes": [c.to_dict() for c in self.classes],
        }


def attendance_percentage(attended: int, total: int) -> int:
    if total <= 0:
        return 0
    return round_half_up(Fraction(100 * attended, total))


def classes_needed(attended: int, total: int) -> int:
    """Consecutive classes to attend before reaching 75%.

    Smallest x with (attended + x) / (total + x) >= 0.75, i.e.
    ceil((0.75 * total - attended) / 0.25), which is exactly 3*total - 4*attended.
    """
    return max(0, 3 * total - 4 * attended)


def attendance_band(percentage: int) -> str:
    if percentage >= ATTENDANCE_THRESHOLD:
        return "good"
    if percentage >= WARNING_THRESHOLD:
        return "warning"
    return "critical"


def aggregate_attendance(semester: Semester, entries: Iterable[DailyEntry]) -> dict[str, SubjectStats]:
    """Per-subject statistics for ``semester`` over the full entry history."""
    stats: dict[str, SubjectStats] = {}
    for subject in semester.subjects:
        stats[subject.code] = SubjectStats(
            code=subject.code,
            name=subject.name,
            faculty=subject.faculty_initials,
            course_type=subject.course_type,
        )

    for entry in entries:
        if entry.day_type != "college" or not semester.in_window(entry.date):
            continue
        for hour in entry.hours:
            if not hour.subject:
                continue
            subject_stats = stats.get(hour.subject.strip())
            if subject_stats is None:
                continue
            status = hour.attendance or DEFAULT_ATTENDANCE
            subject_stats.record(status)
            subject_stats.classes.append(ClassRecord(
                date=entry.date,
                time=hour.time,
                attendance=status,
                unit=hour.unit,
                notes=hour.notes,
            ))

    for s in stats.values():
        s.percentage = attendance_percentage(s.attended, s.total)
        if s.percentage < ATTENDANCE_THRESHOLD:
            s.classes_needed = classes_needed(s.attended, s.total)
        s.classes.sort(key=lambda c: c.date, reverse=True)

    return stats


def filter_subject(stats: dict[str, SubjectStats], code: str = "all") -> list[SubjectStats]:
    """The "all subjects" view, or just the one subject selected."""
    if code == "all":
        return list(stats.values())
    return [s for s in stats.values() if s.code == code]
