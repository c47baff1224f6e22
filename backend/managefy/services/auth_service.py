# Overview: Service-layer operations for registration and login.

"""
Authentication Service

Passwords are hashed with Argon2id (memory-hard, random salt per hash)
through passlib. Login spends one Argon2 verify whether or not the email
exists and answers every failure with the same message, so unknown
emails and wrong passwords are indistinguishable.

Password rules:
- 8 to 64 characters
- At least one letter
- At least one digit
"""

from __future__ import annotations

import re

from flask import current_app
from passlib.hash import argon2

from ..errors import BadRequestError, UnauthorizedError
from ..extensions import db
from ..models import User
from ..validation import normalize_email, require_text
from .concurrency import transactional
from . import session_service


PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 64
LOGIN_FAILED_MESSAGE = "Email or password mismatch"

_argon2 = argon2.using(type="ID")
_dummy_hash: str | None = None


def validate_password_strength(password) -> None:
    """Raises BadRequestError if the password doesn't meet the rules."""
    if not isinstance(password, str):
        raise BadRequestError("Password is required")

    if not PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH:
        raise BadRequestError(
            f"Password must be between {PASSWORD_MIN_LENGTH} and {PASSWORD_MAX_LENGTH} characters long"
        )

    if not re.search(r'[A-Za-z]', password):
        raise BadRequestError("Password must contain at least one letter")

    if not re.search(r'\d', password):
        raise BadRequestError("Password must contain at least one digit")


def hash_password(password: str) -> str:
    validate_password_strength(password)
    return _argon2.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return _argon2.verify(password, password_hash)
    except (ValueError, TypeError):
        return False


def _burn_verify(password: str) -> None:
    """Verify against a throwaway hash so unknown emails cost the same as wrong passwords."""
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = _argon2.hash("managefy-timing-equalizer-1")
    verify_password(password, _dummy_hash)


@transactional
def register(email, password, name) -> tuple[User, str]:
    """
    Create a user and return it with a fresh bearer token.

    Email must be well formed and unused; uniqueness races are caught by
    the unique constraint and surface as BadRequest through the facade.
    """
    email = normalize_email(email)
    validate_password_strength(password)
    name = require_text(name, "name", max_length=120)

    existing = db.session.query(User).filter(User.email == email).first()
    if existing:
        raise BadRequestError(f"Email '{email}' already taken")

    user = User(
        email=email,
        password_hash=hash_password(password),
        name=name,
        validated=False,
    )
    db.session.add(user)
    db.session.flush()

    current_app.logger.info("Registered user %s", user.id)
    return user, session_service.issue_token(user.id)


def login(email, password) -> tuple[User, str]:
    if not isinstance(password, str):
        password = ""

    try:
        email = normalize_email(email)
    except BadRequestError:
        user = None
    else:
        user = db.session.query(User).filter(User.email == email).first()

    if user is None:
        _burn_verify(password)
        raise UnauthorizedError(LOGIN_FAILED_MESSAGE)

    if not verify_password(password, user.password_hash):
        raise UnauthorizedError(LOGIN_FAILED_MESSAGE)

    return user, session_service.issue_token(user.id)


def get_user_for_token(token: str) -> User:
    """Resolve the caller behind a bearer token."""
    claims = session_service.decode_token(token)
    user = db.session.get(User, claims.user_id)
    if not user:
        raise UnauthorizedError("Token user no longer exists")
    return user
