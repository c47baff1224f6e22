# Overview: Service-layer operations for the error log.

"""
Error Log Service

Every failure the facade returns to a client is recorded here, after the
failing transaction was rolled back. Recording must never change the
response: any exception raised while writing is logged and swallowed.
"""

from __future__ import annotations

from flask import current_app

from ..errors import BadRequestError
from ..extensions import db
from ..models import ErrorLog
from ..time_utils import utcnow
from ..validation import require_int, require_text
from .concurrency import transactional


ORIGIN_BACKEND = "Backend"
ORIGIN_CLIENT = "Client"


def record_backend_error(description: str, code: int) -> None:
    """Best-effort write of a Backend-origin error in its own commit."""
    try:
        db.session.add(ErrorLog(
            date=utcnow(),
            description=description or "Unknown error",
            origin=ORIGIN_BACKEND,
            code=code,
        ))
        db.session.commit()
    except Exception:
        current_app.logger.exception("Failed to record error log entry")
        try:
            db.session.rollback()
        except Exception:
            current_app.logger.exception("Rollback after error log failure also failed")


def get_error_logs(limit: int | None = None) -> list[ErrorLog]:
    query = db.session.query(ErrorLog).order_by(ErrorLog.date.desc(), ErrorLog.id.desc())
    if limit is not None:
        query = query.limit(limit)
    return query.all()


@transactional
def report_client_error(description, code) -> ErrorLog:
    """Record an error reported by a front end."""
    description = require_text(description, "description", max_length=10_000)
    code = require_int(code, "code", minimum=0)
    if code > 999:
        raise BadRequestError("code must be an HTTP-like status code")

    entry = ErrorLog(
        date=utcnow(),
        description=description,
        origin=ORIGIN_CLIENT,
        code=code,
    )
    db.session.add(entry)
    db.session.flush()
    return entry
