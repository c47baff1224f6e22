# Overview: The role lattice: collaborator < admin < manager.

from __future__ import annotations

from enum import IntEnum

from ..errors import BadRequestError


class Role(IntEnum):
    COLLABORATOR = 1
    ADMIN = 2
    MANAGER = 3

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def from_text(cls, text: str | None) -> "Role":
        """Parse a role name case-insensitively."""
        if isinstance(text, str):
            role = _BY_LABEL.get(text.strip().lower())
            if role is not None:
                return role
        raise BadRequestError(f"Invalid role: {text}")


_BY_LABEL = {role.name.lower(): role for role in Role}

ROLE_LABELS = tuple(_BY_LABEL)
