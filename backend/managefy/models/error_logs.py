from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class ErrorLog(db.Model):
    """
    Failure surfaced to a client (origin Backend) or reported by a
    front end (origin Client). Append-only.
    """
    __tablename__ = "error_logs"
    __table_args__ = (
        db.Index("ix_error_logs_date", "date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.DateTime, nullable=False)
    description = db.Column(db.Text, nullable=False)
    origin = db.Column(db.String(16), nullable=False)  # Backend, Client
    code = db.Column(db.Integer, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": to_utc_z(self.date),
            "description": self.description,
            "origin": self.origin,
            "code": self.code,
        }
