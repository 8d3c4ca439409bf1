"""Pytest fixtures for the deferred-callback test-suite.

Core tests need nothing but the in-memory job queue; the SQLAlchemy bindings
run against an in-memory SQLite database created once per session.
"""

from __future__ import annotations

import os

import pytest
from when_committed.core.extensions import db as _db
from when_committed.factory import create_app

from tests.helpers.jobs import Backgrounder
from tests.helpers.models import Widget


class TestConfig:
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - Keeps registration outside a transaction an error unless a test opts in.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = "WARNING"
    WHEN_COMMITTED_RUN_NOW_IF_NO_TRANSACTION = False
    WHEN_COMMITTED_DISCARD_ON_TEARDOWN = True


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestConfig` applied.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestConfig)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def session(db):
    """Provide the Flask-scoped session and wipe committed rows afterwards.

    Removing the scoped session at the end also drops its dispatcher, so no
    transaction context leaks from one test into the next.
    """
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(db.session)
    try:
        yield db.session
    finally:
        db.session.rollback()
        db.session.query(Widget).delete()
        db.session.commit()
        db.session.remove()


@pytest.fixture(autouse=True)
def jobs():
    """Reset and return the in-memory job queue used by example callbacks."""
    Backgrounder.reset()
    yield Backgrounder
    Backgrounder.reset()
