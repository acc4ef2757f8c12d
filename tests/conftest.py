"""
Test fixtures for the Personal OS tracker.

Provides app, client, auth_client, and db fixtures with file-based SQLite,
plus a profile_client whose user has finished onboarding.
"""

from __future__ import annotations

import pytest
from datetime import datetime

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sample_data import SEMESTER_3, SEMESTER_4


@pytest.fixture
def app(tmp_path):
    """Create app with file-based SQLite for testing."""
    from app import create_app

    db_file = str(tmp_path / "test.db")
    app = create_app({
        "TESTING": True,
        "DATABASE": db_file,
        "SECRET_KEY": "test-secret-key",
    })

    with app.app_context():
        from database import init_db, run_migrations, get_db

        init_db()
        run_migrations()

        # Seed test user
        db = get_db()
        now = datetime.now().isoformat()
        db.execute(
            "INSERT INTO users (id, name, email, password_hash, created_at, updated_at) "
            "VALUES (1, 'Test Student', 'test@example.com', ?, ?, ?)",
            ("pbkdf2:sha256:600000$test$hash", now, now),
        )
        db.commit()

        yield app


@pytest.fixture
def client(app):
    """Unauthenticated test client."""
    return app.test_client()


@pytest.fixture
def auth_client(app):
    """Authenticated test client (logged in as test user)."""
    from werkzeug.security import generate_password_hash
    from database import get_db

    with app.app_context():
        db = get_db()
        db.execute(
            "UPDATE users SET password_hash = ? WHERE id = 1",
            (generate_password_hash("Testpass123"),),
        )
        db.commit()

    client = app.test_client()
    with client:
        client.post("/login", json={
            "email": "test@example.com",
            "password": "Testpass123",
        })
        yield client


@pytest.fixture
def db(app):
    """Direct database access for store tests."""
    with app.app_context():
        from database import get_db
        yield get_db()


@pytest.fixture
def seeded_profile(app):
    """Onboarded test user with a default schedule and two semesters."""
    from db_stores import UserProfileDB
    from schedule import ScheduleProfile

    with app.app_context():
        profile = UserProfileDB(1)
        data = ScheduleProfile.onboarding_defaults().to_dict()
        data["productiveActivities"] = ["Reading", "Coding"]
        data["unproductiveActivities"] = ["Scrolling"]
        data["enableHealthMetrics"] = True
        data["semesters"] = [SEMESTER_3, SEMESTER_4]
        profile.update(data, complete_onboarding=True)
        return profile


@pytest.fixture
def profile_client(auth_client, seeded_profile):
    """Authenticated client whose user has a saved profile and roster."""
    return auth_client
