"""Unit of Work abstractions and concrete implementations.

This package re-exports the SQLAlchemy-backed unit of work, whose session
transactions drive the deferred-callback dispatcher, alongside the abstract
contract it implements.
"""

from .base import Rollback, UnitOfWork
from .sqlalchemy_uow import SQLAlchemyUnitOfWork

__all__ = [
    "Rollback",
    "UnitOfWork",
    "SQLAlchemyUnitOfWork",
]
