"""
DB-backed store classes for the Personal OS tracker.

Each store is scoped to one user and translates rows to and from the
dataclasses in schedule.py, roster.py, entries.py, health.py and reminders.py.
Writes are whole-record overwrites keyed by (user, date) or (user, id):
the last write wins.
"""

from __future__ import annotations

import json
import logging
import secrets
from datetime import date, datetime
from typing import Optional

from database import get_db
from entries import DailyEntry, HourRecord, entry_doc_id
from health import HealthMetricEntry, recent_history
from reminders import Reminder
from roster import (
    RosterValidationError,
    Semester,
    Subject,
    Unit,
    validate_roster,
)
from schedule import ScheduleProfile

logger = logging.getLogger(__name__)

_SCHEDULE_COLUMNS = (
    "wake_up_time", "usual_sleep_time", "college_start", "college_end",
    "active_evening_start", "active_evening_end", "prep_time_start", "prep_time_end",
    "refresh_time_start", "refresh_time_end", "bus_to_college_start", "bus_to_college_end",
    "bus_return_start", "bus_return_end", "residence_type",
)


# ── User profile (schedule + roster) ─────────────────────────────────


class UserProfileDB:
    """The ``users/{userId}`` document: schedule profile, semesters and onboarding flag."""

    def __init__(self, user_id: int):
        self.user_id = user_id
        self._row = None
        self._schedule: Optional[ScheduleProfile] = None
        self._semesters: list[Semester] = []
        self._load()

    @classmethod
    def load(cls, user_id: int) -> Optional[UserProfileDB]:
        profile = cls(user_id)
        return profile if profile._row else None

    def _load(self) -> None:
        db = get_db()
        self._row = db.execute("SELECT * FROM users WHERE id = ?", (self.user_id,)).fetchone()
        if not self._row:
            return

        sched = db.execute(
            "SELECT * FROM schedule_profiles WHERE user_id = ?", (self.user_id,),
        ).fetchone()
        if sched:
            self._schedule = ScheduleProfile(
                **{col: sched[col] for col in _SCHEDULE_COLUMNS},
                enable_health_metrics=bool(sched["enable_health_metrics"]),
                productive_activities=json.loads(sched["productive_activities"]),
                unproductive_activities=json.loads(sched["unproductive_activities"]),
            )

        self._semesters = []
        for sem in db.execute(
            "SELECT * FROM semesters WHERE user_id = ? ORDER BY position, id", (self.user_id,),
        ).fetchall():
            subjects = []
            for sub in db.execute(
                "SELECT * FROM subjects WHERE semester_id = ? ORDER BY position, id", (sem["id"],),
            ).fetchall():
                units = [
                    Unit(number=u["number"], name=u["name"])
                    for u in db.execute(
                        "SELECT number, name FROM units WHERE subject_id = ? ORDER BY id", (sub["id"],),
                    ).fetchall()
                ]
                subjects.append(Subject(
                    code=sub["code"],
                    name=sub["name"],
                    faculty_initials=sub["faculty_initials"],
                    course_type=sub["course_type"],
                    units=units,
                ))
            self._semesters.append(Semester(
                semester_number=sem["semester_number"],
                start_date=date.fromisoformat(sem["start_date"]) if sem["start_date"] else None,
                end_date=date.fromisoformat(sem["end_date"]) if sem["end_date"] else None,
                subjects=subjects,
            ))

    @property
    def name(self) -> str:
        return self._row["name"] if self._row else ""

    @property
    def schedule(self) -> Optional[ScheduleProfile]:
        return self._schedule

    @property
    def semesters(self) -> list[Semester]:
        return self._semesters

    @property
    def onboarding_complete(self) -> bool:
        return bool(self._row["onboarding_complete"]) if self._row else False

    def to_dict(self) -> dict:
        """Profile in the stored document shape (camelCase)."""
        data = (self._schedule or ScheduleProfile()).to_dict()
        data["semesters"] = [s.to_dict() for s in self._semesters]
        data["onboardingComplete"] = self.onboarding_complete
        data["name"] = self.name
        return data

    def save_schedule(self, schedule: ScheduleProfile) -> None:
        db = get_db()
        with db:
            self._write_schedule(db, schedule)
            self._touch(db)
        self._schedule = schedule

    def _write_schedule(self, db, schedule: ScheduleProfile) -> None:
        columns = list(_SCHEDULE_COLUMNS) + [
            "enable_health_metrics", "productive_activities", "unproductive_activities",
        ]
        values = [getattr(schedule, col) for col in _SCHEDULE_COLUMNS] + [
            int(schedule.enable_health_metrics),
            json.dumps(schedule.productive_activities),
            json.dumps(schedule.unproductive_activities),
        ]
        db.execute(
            f"INSERT OR REPLACE INTO schedule_profiles (user_id, {', '.join(columns)}) "
            f"VALUES (?, {', '.join('?' for _ in columns)})",
            [self.user_id, *values],
        )

    def save_roster(self, semesters: list[Semester]) -> None:
        """Replace the whole roster. Refused while any violation exists."""
        violations = validate_roster(semesters)
        if violations:
            raise RosterValidationError(violations)

        db = get_db()
        with db:
            self._write_roster(db, semesters)
            self._touch(db)
        self._semesters = semesters

    def _write_roster(self, db, semesters: list[Semester]) -> None:
        db.execute("DELETE FROM semesters WHERE user_id = ?", (self.user_id,))
        for pos, sem in enumerate(semesters):
            cur = db.execute(
                "INSERT INTO semesters (user_id, position, semester_number, start_date, end_date) "
                "VALUES (?, ?, ?, ?, ?)",
                (
                    self.user_id, pos, sem.semester_number,
                    sem.start_date.isoformat() if sem.start_date else "",
                    sem.end_date.isoformat() if sem.end_date else "",
                ),
            )
            semester_id = cur.lastrowid
            for sub_pos, sub in enumerate(sem.subjects):
                sub_cur = db.execute(
                    "INSERT INTO subjects (semester_id, position, code, name, faculty_initials, course_type) "
                    "VALUES (?, ?, ?, ?, ?, ?)",
                    (semester_id, sub_pos, sub.code, sub.name, sub.faculty_initials, sub.course_type),
                )
                for unit in sub.units:
                    db.execute(
                        "INSERT INTO units (subject_id, number, name) VALUES (?, ?, ?)",
                        (sub_cur.lastrowid, unit.number, unit.name),
                    )

    def update(self, data: dict, complete_onboarding: bool = False) -> None:
        """Validate and persist a profile document (schedule fields and/or semesters)."""
        schedule = ScheduleProfile.from_dict({**(self._schedule or ScheduleProfile()).to_dict(), **data})
        semesters = None
        if "semesters" in data:
            if not isinstance(data["semesters"], list):
                raise ValueError("semesters must be a list")
            semesters = [Semester.from_dict(s) for s in data["semesters"]]
            violations = validate_roster(semesters)
            if violations:
                raise RosterValidationError(violations)

        # Schedule and roster land together or not at all
        db = get_db()
        with db:
            self._write_schedule(db, schedule)
            if semesters is not None:
                self._write_roster(db, semesters)
            self._touch(db)
        self._schedule = schedule
        if semesters is not None:
            self._semesters = semesters

        if complete_onboarding:
            self.mark_onboarding_complete()
        logger.info("Profile updated for user %s", self.user_id)

    def mark_onboarding_complete(self) -> None:
        db = get_db()
        now = datetime.now().isoformat()
        db.execute(
            "UPDATE users SET onboarding_complete = 1, completed_at = ?, updated_at = ? WHERE id = ?",
            (now, now, self.user_id),
        )
        db.commit()
        self._row = db.execute("SELECT * FROM users WHERE id = ?", (self.user_id,)).fetchone()

    def _touch(self, db) -> None:
        db.execute(
            "UPDATE users SET updated_at = ? WHERE id = ?",
            (datetime.now().isoformat(), self.user_id),
        )


# ── Daily entries ────────────────────────────────────────────────────


class DailyEntryDB:
    """``dailyEntries/{userId}_{yyyy-MM-dd}`` records for one user."""

    def __init__(self, user_id: int):
        self.user_id = user_id

    def _from_row(self, row) -> DailyEntry:
        return DailyEntry(
            user_id=row["user_id"],
            date=date.fromisoformat(row["date"]),
            day_type=row["day_type"],
            hours=[HourRecord.from_dict(h) for h in json.loads(row["hours"])],
            daily_reflection=row["daily_reflection"],
            updated_at=row["updated_at"],
        )

    def get(self, day: date) -> Optional[DailyEntry]:
        db = get_db()
        row = db.execute(
            "SELECT * FROM daily_entries WHERE id = ?", (entry_doc_id(self.user_id, day),),
        ).fetchone()
        return self._from_row(row) if row else None

    def put(self, entry: DailyEntry) -> DailyEntry:
        """Overwrite the whole day. No partial patching."""
        if entry.user_id != self.user_id:
            raise ValueError("Entry belongs to a different user")
        entry.updated_at = datetime.now().isoformat()
        db = get_db()
        db.execute(
            "INSERT OR REPLACE INTO daily_entries "
            "(id, user_id, date, day_type, hours, daily_reflection, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                entry.doc_id, self.user_id, entry.date.isoformat(), entry.day_type,
                json.dumps([h.to_dict() for h in entry.hours]),
                entry.daily_reflection, entry.updated_at,
            ),
        )
        db.commit()
        return entry

    def all(self) -> list[DailyEntry]:
        db = get_db()
        rows = db.execute(
            "SELECT * FROM daily_entries WHERE user_id = ?", (self.user_id,),
        ).fetchall()
        return [self._from_row(r) for r in rows]


# ── Health metrics ───────────────────────────────────────────────────


class HealthMetricsDB:
    """``healthMetrics/{userId}_{yyyy-MM-dd}`` records for one user."""

    def __init__(self, user_id: int):
        self.user_id = user_id

    def _from_row(self, row) -> HealthMetricEntry:
        return HealthMetricEntry(
            user_id=row["user_id"],
            date=date.fromisoformat(row["date"]),
            morning_weight=row["morning_weight"],
            glasses_of_water=row["glasses_of_water"],
            steps=row["steps"],
            calories_burnt=row["calories_burnt"],
            updated_at=row["updated_at"],
        )

    def get(self, day: date) -> Optional[HealthMetricEntry]:
        db = get_db()
        row = db.execute(
            "SELECT * FROM health_metrics WHERE id = ?", (entry_doc_id(self.user_id, day),),
        ).fetchone()
        return self._from_row(row) if row else None

    def put(self, entry: HealthMetricEntry) -> HealthMetricEntry:
        entry.updated_at = datetime.now().isoformat()
        db = get_db()
        db.execute(
            "INSERT OR REPLACE INTO health_metrics "
            "(id, user_id, date, morning_weight, glasses_of_water, steps, calories_burnt, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (
                entry_doc_id(self.user_id, entry.date), self.user_id, entry.date.isoformat(),
                entry.morning_weight, entry.glasses_of_water, entry.steps,
                entry.calories_burnt, entry.updated_at,
            ),
        )
        db.commit()
        return entry

    def all(self) -> list[HealthMetricEntry]:
        db = get_db()
        rows = db.execute(
            "SELECT * FROM health_metrics WHERE user_id = ?", (self.user_id,),
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def history(self, limit: int = 7) -> list[HealthMetricEntry]:
        return recent_history(self.all(), limit)


# ── Reminders ────────────────────────────────────────────────────────


class ReminderStoreDB:
    """``reminders/{autoId}`` records for one user, ordered by deadline."""

    def __init__(self, user_id: int):
        self.user_id = user_id

    def _from_row(self, row) -> Reminder:
        return Reminder(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            description=row["description"],
            duration=row["duration"],
            deadline=date.fromisoformat(row["deadline"]),
            reminder_period=row["reminder_period"],
            completed=bool(row["completed"]),
            completed_at=row["completed_at"],
            created_at=row["created_at"],
        )

    @property
    def reminders(self) -> list[Reminder]:
        db = get_db()
        rows = db.execute(
            "SELECT * FROM reminders WHERE user_id = ? ORDER BY deadline ASC, created_at ASC",
            (self.user_id,),
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def get(self, reminder_id: str) -> Optional[Reminder]:
        db = get_db()
        row = db.execute(
            "SELECT * FROM reminders WHERE id = ? AND user_id = ?", (reminder_id, self.user_id),
        ).fetchone()
        return self._from_row(row) if row else None

    def create(self, name: str, deadline: date, description: str = "", duration: str = "",
               reminder_period: int = 1) -> Reminder:
        reminder = Reminder(
            id=secrets.token_urlsafe(12),
            user_id=self.user_id,
            name=name,
            deadline=deadline,
            description=description,
            duration=duration,
            reminder_period=reminder_period,
            created_at=datetime.now().isoformat(),
        )
        db = get_db()
        db.execute(
            "INSERT INTO reminders (id, user_id, name, description, duration, deadline, "
            "reminder_period, completed, completed_at, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, 0, NULL, ?, ?)",
            (
                reminder.id, self.user_id, name, description, duration, deadline.isoformat(),
                reminder_period, reminder.created_at, reminder.created_at,
            ),
        )
        db.commit()
        return reminder

    def update(self, reminder_id: str, name: str, deadline: date, description: str = "",
               duration: str = "", reminder_period: int = 1) -> Optional[Reminder]:
        db = get_db()
        cur = db.execute(
            "UPDATE reminders SET name = ?, description = ?, duration = ?, deadline = ?, "
            "reminder_period = ?, updated_at = ? WHERE id = ? AND user_id = ?",
            (
                name, description, duration, deadline.isoformat(), reminder_period,
                datetime.now().isoformat(), reminder_id, self.user_id,
            ),
        )
        db.commit()
        if cur.rowcount == 0:
            return None
        return self.get(reminder_id)

    def delete(self, reminder_id: str) -> bool:
        db = get_db()
        cur = db.execute(
            "DELETE FROM reminders WHERE id = ? AND user_id = ?", (reminder_id, self.user_id),
        )
        db.commit()
        return cur.rowcount > 0

    def toggle(self, reminder_id: str) -> Optional[Reminder]:
        reminder = self.get(reminder_id)
        if reminder is None:
            return None
        completed = not reminder.completed
        completed_at = datetime.now().isoformat() if completed else None
        db = get_db()
        db.execute(
            "UPDATE reminders SET completed = ?, completed_at = ?, updated_at = ? "
            "WHERE id = ? AND user_id = ?",
            (int(completed), completed_at, datetime.now().isoformat(), reminder_id, self.user_id),
        )
        db.commit()
        return self.get(reminder_id)
