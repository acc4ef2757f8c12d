"""
Blueprint registration for the Personal OS tracker.

All blueprints are registered without URL prefixes; each route carries its
full /api/... path.
"""

from __future__ import annotations


def register_blueprints(app):
    from blueprints.profile import bp as profile_bp
    from blueprints.tracker import bp as tracker_bp
    from blueprints.attendance import bp as attendance_bp
    from blueprints.dashboard import bp as dashboard_bp
    from blueprints.health import bp as health_bp
    from blueprints.reminders import bp as reminders_bp

    app.register_blueprint(profile_bp)
    app.register_blueprint(tracker_bp)
    app.register_blueprint(attendance_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(health_bp)
    app.register_blueprint(reminders_bp)
