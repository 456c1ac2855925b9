"""
Pytest fixtures for the SoftFlow back-end.

Each test gets a fresh app on an in-memory SQLite database. HTTP tests talk
to the app through the test client only (every request gets its own app
context, so Flask-Login re-resolves the user each time); service tests use
the ``ctx`` fixture to work inside an app context directly.
"""

import pytest

from softflow import create_app
from softflow.extensions import db
from softflow.models import User
from softflow.settings import TestConfig
from softflow.utils.passwords import hash_password

DEFAULT_PASSWORD = "correct-horse"


@pytest.fixture()
def app():
    """Create application for testing."""
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def ctx(app):
    """Push an app context for service-level tests."""
    with app.app_context():
        yield app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def make_user(app):
    """Factory: create a user and return its id."""

    def _make(username, password=DEFAULT_PASSWORD, **fields):
        with app.app_context():
            user = User(username=username, password_hash=hash_password(password), **fields)
            db.session.add(user)
            db.session.commit()
            return user.id

    return _make


def login(client, username, password=DEFAULT_PASSWORD):
    return client.post("/api/login", json={"username": username, "password": password})


@pytest.fixture()
def admin_client(app, make_user):
    make_user("admin", is_admin=True, is_verified=True)
    c = app.test_client()
    resp = login(c, "admin")
    assert resp.status_code == 200
    return c


@pytest.fixture()
def alice_id(make_user):
    return make_user("alice", email="alice@example.com", phone="+15550001")


@pytest.fixture()
def alice_client(app, alice_id):
    c = app.test_client()
    resp = login(c, "alice")
    assert resp.status_code == 200
    return c


@pytest.fixture()
def bob_client(app, make_user):
    make_user("bob", email="bob@example.com")
    c = app.test_client()
    resp = login(c, "bob")
    assert resp.status_code == 200
    return c
