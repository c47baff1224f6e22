# Overview: Role predicates. Pure functions over Role values, no database access.

from .roles import Role


def can_read(caller: Role) -> bool:
    """Any live role may read its business data."""
    return caller >= Role.COLLABORATOR


def can_write_catalog(caller: Role) -> bool:
    """Businesses, clients, suppliers and products are written by admins and managers."""
    return caller >= Role.ADMIN


def can_delete_business(caller: Role) -> bool:
    return caller == Role.MANAGER


def can_grant(caller: Role, produced: Role) -> bool:
    """
    Whether caller may create a role of rank `produced` (or update a role to it).

    The caller must strictly outrank the produced role, so only the manager
    grants admin and collaborators grant nothing. Manager is never granted;
    it only moves by transfer.
    """
    if produced == Role.MANAGER:
        return False
    return caller > produced


def can_modify(caller: Role, target: Role) -> bool:
    """
    Whether caller may update or delete another user's existing role.

    The manager's role is untouchable here (transfer first).
    """
    if target == Role.MANAGER:
        return False
    return caller > target
