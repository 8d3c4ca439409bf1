"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData

from when_committed.extension import WhenCommitted

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
when_committed = WhenCommitted()


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy and the deferred-callback extension.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. SQLAlchemy is bound
        first so its session teardown runs after ours.
    """
    db.init_app(app)
    when_committed.init_app(app)
