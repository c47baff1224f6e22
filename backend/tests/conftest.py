"""
Pytest fixtures for Managefy backend tests.

Provides an in-memory database, a test client, a recording mail client,
and factories for users, businesses and memberships.
"""

import pytest
from managefy import create_app
from managefy.errors import InternalError
from managefy.extensions import db
from managefy.models import UserRole, User
from managefy.services import business_service, session_service
from managefy.services.auth_service import hash_password
from managefy.services.mail_service import EXTENSION_KEY


DEFAULT_PASSWORD = "Password123"


class FakeMailClient:
    """Records sent codes instead of talking to an SMTP server."""

    def __init__(self):
        self.sent = []
        self.fail = False

    def send_code(self, to_email: str, code: str) -> None:
        if self.fail:
            raise InternalError("Couldn't send the validation email")
        self.sent.append((to_email, code))


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'JWT_SECRET': 'test-secret',
        'JWT_LIFETIME_HOURS': 12,
        'MIGRATIONS_RUN': False,
    })
    app.extensions[EXTENSION_KEY] = FakeMailClient()

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def mailbox(app):
    """The recording mail client, emptied for each test."""
    mail = app.extensions[EXTENSION_KEY]
    mail.sent.clear()
    mail.fail = False
    yield mail
    mail.fail = False


@pytest.fixture(scope='function')
def make_user(db_session):
    """Factory: make_user("alice@mail.com") -> committed User."""
    def _make_user(email: str, name: str | None = None, validated: bool = False) -> User:
        user = User(
            email=email,
            password_hash=hash_password(DEFAULT_PASSWORD),
            name=name or email.split("@")[0],
            validated=validated,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture(scope='function')
def make_business(db_session):
    """Factory: make_business(owner, "shop/") -> Business managed by owner."""
    def _make_business(owner: User, slug: str, name: str | None = None):
        return business_service.create_business(owner, {
            "name": name or slug.strip("/").title(),
            "description": "Test business",
            "urlSlug": slug,
        })

    return _make_business


@pytest.fixture(scope='function')
def add_member(db_session):
    """Factory: add_member(user, business, "admin") -> UserRole."""
    def _add_member(user: User, business, role: str) -> UserRole:
        user_role = UserRole(user_id=user.id, business_id=business.id, role=role)
        db_session.add(user_role)
        db_session.commit()
        return user_role

    return _add_member


@pytest.fixture(scope='function')
def manager(make_user):
    return make_user("manager@mail.com", name="Manager", validated=True)


@pytest.fixture(scope='function')
def business(manager, make_business):
    return make_business(manager, "groceryfy/", name="Groceryfy")


def auth_headers(user: User) -> dict:
    """Helper to create Authorization headers for a user."""
    return {'Authorization': f'Bearer {session_service.issue_token(user.id)}'}


@pytest.fixture(scope='function')
def headers_for(db_session):
    """Factory: headers_for(user) -> Authorization headers."""
    return auth_headers
