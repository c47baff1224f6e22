from __future__ import annotations

from ..extensions import db
from ..permissions.roles import Role
from ..time_utils import to_utc_z


class Business(db.Model):
    """
    Multi-tenant root: every client, supplier, product, sale and user role
    belongs to exactly one business.

    Soft-deleted through deletion_date; default queries filter it out.
    """
    __tablename__ = "businesses"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)
    url_slug = db.Column(db.String(120), nullable=False, unique=True, index=True)
    deletion_date = db.Column(db.DateTime, nullable=True, index=True)

    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Business id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "urlSlug": self.url_slug,
            "deletionDate": to_utc_z(self.deletion_date),
        }


class UserRole(db.Model):
    """
    A user's authority within one business.

    The role is a single tagged value (collaborator < admin < manager).
    The partial unique index guarantees at most one manager per business;
    transfers demote the old manager before promoting the new one.
    """
    __tablename__ = "user_roles"
    __table_args__ = (
        db.Index(
            "uq_user_roles_business_manager",
            "business_id",
            unique=True,
            sqlite_where=db.text("role = 'manager'"),
            postgresql_where=db.text("role = 'manager'"),
        ),
    )

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), primary_key=True)
    business_id = db.Column(db.Integer, db.ForeignKey("businesses.id"), primary_key=True, index=True)
    role = db.Column(db.String(16), nullable=False)

    user = db.relationship("User", backref=db.backref("user_roles", lazy=True))
    business = db.relationship("Business", backref=db.backref("user_roles", lazy=True))

    @property
    def rank(self) -> Role:
        return Role.from_text(self.role)

    @property
    def is_manager(self) -> bool:
        return self.role == Role.MANAGER.label

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.label

    @property
    def is_collaborator(self) -> bool:
        return self.role == Role.COLLABORATOR.label

    def __repr__(self) -> str:
        return f"<UserRole user_id={self.user_id} business_id={self.business_id} role={self.role}>"

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "businessId": self.business_id,
            "role": self.role,
            "isManager": self.is_manager,
            "isAdmin": self.is_admin,
            "isCollaborator": self.is_collaborator,
        }
