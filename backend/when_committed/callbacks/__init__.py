"""Deferred-callback core: register callbacks that run after commit.

The state machine is independent of Flask and SQLAlchemy; :mod:`.session`
binds it to a SQLAlchemy session's transaction events, which
:mod:`when_committed.uow` and :mod:`when_committed.models` build on.
"""

from .context import TransactionContext
from .dispatcher import Dispatcher
from .errors import InactiveTransactionError, RequiresTransactionError, WhenCommittedError
from .listener import ContextListener, TransactionListener
from .record import CallbackRecord, CallbackState
from .session import SessionBinding, binding_for, dispatcher_for
from .stack import TransactionStack

__all__ = [
    "CallbackRecord",
    "CallbackState",
    "ContextListener",
    "Dispatcher",
    "InactiveTransactionError",
    "RequiresTransactionError",
    "SessionBinding",
    "TransactionContext",
    "TransactionListener",
    "TransactionStack",
    "WhenCommittedError",
    "binding_for",
    "dispatcher_for",
]
