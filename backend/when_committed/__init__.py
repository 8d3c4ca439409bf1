"""Run callbacks only after the enclosing database transaction commits.

The framework-agnostic core lives in :mod:`when_committed.callbacks`; the
SQLAlchemy unit of work, model mixin and Flask extension bind it to a real
session.
"""

from __future__ import annotations

from .callbacks import (
    CallbackRecord,
    CallbackState,
    Dispatcher,
    InactiveTransactionError,
    RequiresTransactionError,
    TransactionContext,
    TransactionListener,
    TransactionStack,
    WhenCommittedError,
    dispatcher_for,
)
from .extension import WhenCommitted
from .factory import create_app

__all__ = [
    "CallbackRecord",
    "CallbackState",
    "Dispatcher",
    "InactiveTransactionError",
    "RequiresTransactionError",
    "TransactionContext",
    "TransactionListener",
    "TransactionStack",
    "WhenCommitted",
    "WhenCommittedError",
    "create_app",
    "dispatcher_for",
]
