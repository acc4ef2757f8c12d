"""
User Authentication — Flask-Login blueprint.

Provides register, login, and logout endpoints (JSON or form bodies).
Uses werkzeug.security for password hashing.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta

from flask import Blueprint, jsonify, request
from flask_login import LoginManager, UserMixin, login_required, login_user, logout_user, current_user
from werkzeug.security import generate_password_hash, check_password_hash

from audit import log_event
from database import get_db
from extensions import limiter

LOCKOUT_THRESHOLD = 5
LOCKOUT_MINUTES = 15

auth_bp = Blueprint("auth", __name__)
login_manager = LoginManager()


class User(UserMixin):
    """Wraps a DB user row for Flask-Login."""

    def __init__(self, id: int, name: str, email: str):
        self.id = id
        self.name = name
        self.email = email

    @staticmethod
    def get(user_id: int):
        db = get_db()
        row = db.execute("SELECT id, name, email FROM users WHERE id = ?", (user_id,)).fetchone()
        if row:
            return User(row["id"], row["name"], row["email"])
        return None

    @staticmethod
    def get_by_email(email: str):
        db = get_db()
        return db.execute(
            "SELECT id, name, email, password_hash, login_attempts, locked_until, onboarding_complete "
            "FROM users WHERE email = ?", (email,),
        ).fetchone()


@login_manager.user_loader
def load_user(user_id):
    return User.get(int(user_id))


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"error": "Authentication required"}), 401


def _payload() -> dict:
    """Request body as a dict, whether JSON or form-encoded."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def _validate_password(password: str) -> str | None:
    """Return an error message if password is too weak, else None."""
    if len(password) < 8:
        return "Password must be at least 8 characters."
    if not any(c.isupper() for c in password):
        return "Password must contain at least one uppercase letter."
    if not any(c.islower() for c in password):
        return "Password must contain at least one lowercase letter."
    if not any(c.isdigit() for c in password):
        return "Password must contain at least one digit."
    return None


@auth_bp.route("/login", methods=["POST"])
@limiter.limit("5 per 15 minutes")
def login():
    if current_user.is_authenticated:
        return jsonify({"ok": True, "userId": current_user.id})

    data = _payload()
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    if not email or not password:
        return jsonify({"error": "Email and password are required."}), 400

    row = User.get_by_email(email)
    if not row:
        return jsonify({"error": "Invalid email or password."}), 401

    locked_until = row["locked_until"]
    if locked_until:
        try:
            remaining = (datetime.fromisoformat(locked_until) - datetime.now()).total_seconds()
        except ValueError:
            remaining = 0
        if remaining > 0:
            mins = math.ceil(remaining / 60)
            log_event("login_locked", row["id"], email=email)
            return jsonify({"error": f"Account temporarily locked. Try again in {mins} minute(s)."}), 429

    db = get_db()
    if not row["password_hash"] or not check_password_hash(row["password_hash"], password):
        attempts = row["login_attempts"] + 1
        if attempts >= LOCKOUT_THRESHOLD:
            db.execute(
                "UPDATE users SET login_attempts=?, locked_until=? WHERE id=?",
                (attempts, (datetime.now() + timedelta(minutes=LOCKOUT_MINUTES)).isoformat(), row["id"]),
            )
        else:
            db.execute("UPDATE users SET login_attempts=? WHERE id=?", (attempts, row["id"]))
        db.commit()
        log_event("login_failed", row["id"], email=email, attempts=attempts)
        return jsonify({"error": "Invalid email or password."}), 401

    # Success: reset lockout fields
    db.execute("UPDATE users SET login_attempts=0, locked_until='' WHERE id=?", (row["id"],))
    db.commit()

    login_user(User(row["id"], row["name"], row["email"]), remember=True)
    log_event("login_success", row["id"])
    return jsonify({
        "ok": True,
        "userId": row["id"],
        "onboardingComplete": bool(row["onboarding_complete"]),
    })


@auth_bp.route("/register", methods=["POST"])
@limiter.limit("3 per hour")
def register():
    if current_user.is_authenticated:
        return jsonify({"error": "Already signed in."}), 400

    data = _payload()
    name = (data.get("name") or "").strip()
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""
    confirm = data.get("confirm_password") or data.get("confirmPassword") or ""

    if not name or not email or not password:
        return jsonify({"error": "All fields are required."}), 400

    if password != confirm:
        return jsonify({"error": "Passwords do not match."}), 400

    pw_error = _validate_password(password)
    if pw_error:
        return jsonify({"error": pw_error}), 400

    if User.get_by_email(email):
        return jsonify({"error": "An account with this email already exists."}), 409

    db = get_db()
    now = datetime.now().isoformat()
    cur = db.execute(
        "INSERT INTO users (name, email, password_hash, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
        (name, email, generate_password_hash(password), now, now),
    )
    user_id = cur.lastrowid
    db.commit()

    log_event("register", user_id, email=email)
    login_user(User(user_id, name, email), remember=True)
    return jsonify({"ok": True, "userId": user_id, "onboardingComplete": False}), 201


@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    log_event("logout", current_user.id)
    logout_user()
    return jsonify({"ok": True})
