"""
Audit trail for account and profile changes.

Each event becomes a row in audit_log and a structured log line. Extra
keyword fields are folded into the detail column as ``key=value`` pairs.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime

from flask import has_request_context, request

from database import get_db

logger = logging.getLogger(__name__)


def _format_detail(detail: str, fields: dict) -> str:
    parts = [detail] if detail else []
    parts.extend(f"{k}={v}" for k, v in sorted(fields.items()))
    return " ".join(parts)


def log_event(action: str, user_id: int | None = None, detail: str = "", **fields) -> None:
    """Record ``action`` for ``user_id``. A failed audit write never fails the caller."""
    detail = _format_detail(detail, fields)
    if has_request_context():
        ip = request.remote_addr or ""
        ua = request.headers.get("User-Agent", "")
    else:
        ip = ua = ""

    try:
        db = get_db()
        db.execute(
            "INSERT INTO audit_log (user_id, action, detail, ip_address, user_agent, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (user_id, action, detail, ip, ua, datetime.now().isoformat()),
        )
        db.commit()
    except sqlite3.Error:
        logger.warning("audit write failed for %s", action, exc_info=True)

    logger.info("audit: %s %s", action, detail, extra={"user_id": user_id})
