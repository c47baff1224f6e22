# Overview: Role lattice package.
# Re-exports the role enum and the predicates every mutation is checked against.

from .roles import Role, ROLE_LABELS
from .rules import (
    can_read,
    can_write_catalog,
    can_delete_business,
    can_grant,
    can_modify,
)

__all__ = [
    "Role",
    "ROLE_LABELS",
    "can_read",
    "can_write_catalog",
    "can_delete_business",
    "can_grant",
    "can_modify",
]
