from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class User(db.Model):
    """
    Account that can participate in businesses through user roles.

    Emails are stored lower-cased so the unique constraint is
    case-insensitive. The password hash never leaves the model.
    """
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(120), nullable=False)
    validated = db.Column(db.Boolean, nullable=False, default=False)
    deletion_date = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "validated": self.validated,
            "deletionDate": to_utc_z(self.deletion_date),
        }


class UserValidation(db.Model):
    """One pending email validation code per user; regenerating replaces it."""
    __tablename__ = "user_validations"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, unique=True)
    code = db.Column(db.String(16), nullable=False)
    expiry_at = db.Column(db.DateTime, nullable=False)

    user = db.relationship("User")
