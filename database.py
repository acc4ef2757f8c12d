"""
SQLite database layer for the Personal OS tracker.

Uses raw sqlite3 with WAL mode and parameterized queries.
A schema_version table handles migrations.

Document-style records keep their logical keys as primary keys:
daily_entries.id and health_metrics.id are "{user_id}_{yyyy-MM-dd}",
reminders.id is a random token.
"""

from __future__ import annotations

import fcntl
import sqlite3
from datetime import datetime
from pathlib import Path

from flask import current_app, g

DEFAULT_DB_PATH = Path(__file__).parent / "personal_os.db"


SCHEMA = """
-- Migration tracking
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER NOT NULL,
    applied_at TEXT NOT NULL
);

-- Users
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    email TEXT UNIQUE,
    password_hash TEXT,
    onboarding_complete INTEGER NOT NULL DEFAULT 0,
    completed_at TEXT NOT NULL DEFAULT '',
    login_attempts INTEGER NOT NULL DEFAULT 0,
    locked_until TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL DEFAULT '',
    updated_at TEXT NOT NULL DEFAULT ''
);

-- Daily time-block configuration (one row per user)
CREATE TABLE IF NOT EXISTS schedule_profiles (
    user_id INTEGER PRIMARY KEY REFERENCES users(id) ON DELETE CASCADE,
    wake_up_time TEXT NOT NULL DEFAULT '',
    usual_sleep_time TEXT NOT NULL DEFAULT '',
    college_start TEXT NOT NULL DEFAULT '',
    college_end TEXT NOT NULL DEFAULT '',
    active_evening_start TEXT NOT NULL DEFAULT '',
    active_evening_end TEXT NOT NULL DEFAULT '',
    prep_time_start TEXT NOT NULL DEFAULT '',
    prep_time_end TEXT NOT NULL DEFAULT '',
    refresh_time_start TEXT NOT NULL DEFAULT '',
    refresh_time_end TEXT NOT NULL DEFAULT '',
    bus_to_college_start TEXT NOT NULL DEFAULT '',
    bus_to_college_end TEXT NOT NULL DEFAULT '',
    bus_return_start TEXT NOT NULL DEFAULT '',
    bus_return_end TEXT NOT NULL DEFAULT '',
    residence_type TEXT NOT NULL DEFAULT 'day-scholar',
    enable_health_metrics INTEGER NOT NULL DEFAULT 0,
    productive_activities TEXT NOT NULL DEFAULT '[]',
    unproductive_activities TEXT NOT NULL DEFAULT '[]'
);

-- Roster: semesters -> subjects -> units, list order kept in position
CREATE TABLE IF NOT EXISTS semesters (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    position INTEGER NOT NULL DEFAULT 0,
    semester_number INTEGER NOT NULL,
    start_date TEXT NOT NULL DEFAULT '',
    end_date TEXT NOT NULL DEFAULT ''
);
CREATE INDEX IF NOT EXISTS idx_semesters_user ON semesters(user_id, position);

CREATE TABLE IF NOT EXISTS subjects (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    semester_id INTEGER NOT NULL REFERENCES semesters(id) ON DELETE CASCADE,
    position INTEGER NOT NULL DEFAULT 0,
    code TEXT NOT NULL,
    name TEXT NOT NULL,
    faculty_initials TEXT NOT NULL DEFAULT '',
    course_type TEXT NOT NULL DEFAULT 'theory'
);

CREATE TABLE IF NOT EXISTS units (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    subject_id INTEGER NOT NULL REFERENCES subjects(id) ON DELETE CASCADE,
    number INTEGER NOT NULL,
    name TEXT NOT NULL DEFAULT ''
);

-- Daily entries, one per user per day
CREATE TABLE IF NOT EXISTS daily_entries (
    id TEXT PRIMARY KEY,
    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    date TEXT NOT NULL,
    day_type TEXT NOT NULL DEFAULT 'college',
    hours TEXT NOT NULL DEFAULT '[]',
    daily_reflection TEXT NOT NULL DEFAULT '',
    updated_at TEXT NOT NULL DEFAULT '',
    UNIQUE(user_id, date)
);
CREATE INDEX IF NOT EXISTS idx_daily_entries_user ON daily_entries(user_id);

-- Health metrics, one per user per day
CREATE TABLE IF NOT EXISTS health_metrics (
    id TEXT PRIMARY KEY,
    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    date TEXT NOT NULL,
    morning_weight TEXT NOT NULL DEFAULT '',
    glasses_of_water TEXT NOT NULL DEFAULT '',
    steps TEXT NOT NULL DEFAULT '',
    calories_burnt TEXT NOT NULL DEFAULT '',
    updated_at TEXT NOT NULL DEFAULT ''
);
CREATE INDEX IF NOT EXISTS idx_health_metrics_user ON health_metrics(user_id);

-- Reminders
CREATE TABLE IF NOT EXISTS reminders (
    id TEXT PRIMARY KEY,
    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    duration TEXT NOT NULL DEFAULT '',
    deadline TEXT NOT NULL,
    reminder_period INTEGER NOT NULL DEFAULT 1,
    completed INTEGER NOT NULL DEFAULT 0,
    completed_at TEXT,
    created_at TEXT NOT NULL DEFAULT '',
    updated_at TEXT NOT NULL DEFAULT ''
);
CREATE INDEX IF NOT EXISTS idx_reminders_user_deadline ON reminders(user_id, deadline);

-- Audit log
CREATE TABLE IF NOT EXISTS audit_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER,
    action TEXT NOT NULL,
    detail TEXT NOT NULL DEFAULT '',
    ip_address TEXT NOT NULL DEFAULT '',
    user_agent TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL DEFAULT ''
);
CREATE INDEX IF NOT EXISTS idx_audit_user ON audit_log(user_id, created_at);
"""


# Versioned migrations: (version, sql). Applied on top of SCHEMA, in order.
MIGRATIONS: list[tuple[int, str]] = []


def get_db():
    """Return a DB connection from Flask g, creating if needed."""
    if "db" not in g:
        db_path = current_app.config.get("DATABASE", str(DEFAULT_DB_PATH))
        g.db = sqlite3.connect(db_path)
        g.db.row_factory = sqlite3.Row
        g.db.execute("PRAGMA journal_mode=WAL")
        g.db.execute("PRAGMA foreign_keys=ON")
    return g.db


def close_db(e=None) -> None:
    """Teardown handler — close DB connection."""
    db = g.pop("db", None)
    if db is not None:
        db.close()


def init_db() -> None:
    """Execute schema DDL to create all tables."""
    db = get_db()
    db.executescript(SCHEMA)
    db.commit()


def run_migrations() -> None:
    """Apply any unapplied versioned migrations.

    Uses file-based locking to prevent race conditions when multiple
    Gunicorn workers start simultaneously.
    """
    db_path = current_app.config.get("DATABASE", str(DEFAULT_DB_PATH))
    lock_file = None

    lock_path = Path(db_path).with_suffix(".migration.lock")
    try:
        lock_file = open(lock_path, "w")
        fcntl.flock(lock_file, fcntl.LOCK_EX)
    except OSError:
        lock_file = None

    try:
        db = get_db()
        applied = {
            row["version"]
            for row in db.execute("SELECT version FROM schema_version").fetchall()
        }
        for version, sql in MIGRATIONS:
            if version not in applied:
                try:
                    db.executescript(sql)
                except sqlite3.OperationalError as e:
                    err_msg = str(e).lower()
                    if "duplicate column" not in err_msg and "already exists" not in err_msg:
                        raise
                db.execute(
                    "INSERT INTO schema_version (version, applied_at) VALUES (?, ?)",
                    (version, datetime.now().isoformat()),
                )
                db.commit()
    finally:
        if lock_file:
            fcntl.flock(lock_file, fcntl.LOCK_UN)
            lock_file.close()


def init_app(app) -> None:
    """Register teardown and auto-init on first request."""
    app.teardown_appcontext(close_db)

    @app.before_request
    def _ensure_db():
        if not getattr(app, "_db_initialized", False):
            init_db()
            run_migrations()
            app._db_initialized = True
