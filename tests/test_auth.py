"""Tests for auth.py — register, login, logout, protected routes, lockout."""

import pytest
from datetime import datetime, timedelta
from werkzeug.security import generate_password_hash


class TestRegister:
    def test_register_success(self, client):
        resp = client.post("/register", json={
            "name": "New User",
            "email": "New@Test.com",
            "password": "Securepass123",
            "confirmPassword": "Securepass123",
        })
        assert resp.status_code == 201
        data = resp.get_json()
        assert data["onboardingComplete"] is False
        # Logged in straight away
        assert client.get("/api/profile").status_code == 200

    def test_register_form_body(self, client):
        resp = client.post("/register", data={
            "name": "Form User",
            "email": "form@test.com",
            "password": "Securepass123",
            "confirm_password": "Securepass123",
        })
        assert resp.status_code == 201

    def test_register_password_mismatch(self, client):
        resp = client.post("/register", json={
            "name": "User",
            "email": "mismatch@test.com",
            "password": "Pass1234",
            "confirmPassword": "Different1",
        })
        assert resp.status_code == 400
        assert "Passwords do not match" in resp.get_json()["error"]

    @pytest.mark.parametrize("password,message", [
        ("Ab1", "at least 8"),
        ("alllower123", "uppercase"),
        ("ALLUPPER123", "lowercase"),
        ("NoDigitsHere", "digit"),
    ])
    def test_register_weak_password(self, client, password, message):
        resp = client.post("/register", json={
            "name": "User",
            "email": "weak@test.com",
            "password": password,
            "confirmPassword": password,
        })
        assert resp.status_code == 400
        assert message in resp.get_json()["error"]

    def test_register_duplicate_email(self, client):
        resp = client.post("/register", json={
            "name": "Second",
            "email": "test@example.com",
            "password": "Pass123456",
            "confirmPassword": "Pass123456",
        })
        assert resp.status_code == 409
        assert "already exists" in resp.get_json()["error"]

    def test_register_missing_fields(self, client):
        resp = client.post("/register", json={"email": "x@test.com"})
        assert resp.status_code == 400


class TestLogin:
    @pytest.fixture(autouse=True)
    def _password(self, app):
        with app.app_context():
            from database import get_db
            db = get_db()
            db.execute(
                "UPDATE users SET password_hash = ? WHERE id = 1",
                (generate_password_hash("Testpass123"),),
            )
            db.commit()

    def test_login_success(self, client):
        resp = client.post("/login", json={"email": "test@example.com", "password": "Testpass123"})
        assert resp.status_code == 200
        assert resp.get_json()["userId"] == 1

    def test_login_email_case_insensitive(self, client):
        resp = client.post("/login", json={"email": " TEST@example.com ", "password": "Testpass123"})
        assert resp.status_code == 200

    def test_login_wrong_password(self, client):
        resp = client.post("/login", json={"email": "test@example.com", "password": "wrong"})
        assert resp.status_code == 401

    def test_login_unknown_email(self, client):
        resp = client.post("/login", json={"email": "nobody@test.com", "password": "Testpass123"})
        assert resp.status_code == 401

    def test_login_missing_fields(self, client):
        assert client.post("/login", json={"email": "test@example.com"}).status_code == 400

    def test_lockout_after_failures(self, client):
        for _ in range(5):
            client.post("/login", json={"email": "test@example.com", "password": "wrong"})
        resp = client.post("/login", json={"email": "test@example.com", "password": "Testpass123"})
        assert resp.status_code == 429
        assert "locked" in resp.get_json()["error"]

    def test_expired_lock_allows_login(self, app, client):
        with app.app_context():
            from database import get_db
            db = get_db()
            db.execute(
                "UPDATE users SET login_attempts = 5, locked_until = ? WHERE id = 1",
                ((datetime.now() - timedelta(minutes=1)).isoformat(),),
            )
            db.commit()
        resp = client.post("/login", json={"email": "test@example.com", "password": "Testpass123"})
        assert resp.status_code == 200

    def test_failed_login_audited(self, app, client):
        client.post("/login", json={"email": "test@example.com", "password": "wrong"})
        with app.app_context():
            from database import get_db
            row = get_db().execute(
                "SELECT action, detail FROM audit_log WHERE user_id = 1 ORDER BY id DESC"
            ).fetchone()
            assert row["action"] == "login_failed"
            assert "attempts=1" in row["detail"]


class TestLogout:
    def test_logout_then_blocked(self, auth_client):
        assert auth_client.get("/api/profile").status_code == 200
        assert auth_client.post("/logout").status_code == 200
        assert auth_client.get("/api/profile").status_code == 401
