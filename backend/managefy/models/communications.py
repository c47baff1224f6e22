from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Notification(db.Model):
    """
    Per-user notification emitted as a side effect of core operations.

    kind: Low, Normal, Priority
    state: Unread -> Read -> Closed
    """
    __tablename__ = "notifications"
    __table_args__ = (
        db.Index("ix_notifications_user_state", "user_id", "state"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    message = db.Column(db.Text, nullable=False)
    kind = db.Column(db.String(16), nullable=False, default="Normal")
    state = db.Column(db.String(16), nullable=False, default="Unread")
    created_at = db.Column(db.DateTime, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "message": self.message,
            "kind": self.kind,
            "state": self.state,
            "createdAt": to_utc_z(self.created_at),
        }
