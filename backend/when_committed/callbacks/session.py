"""Bind one :class:`Dispatcher` to each SQLAlchemy session.

The binding listens to the session's transaction events, so contexts follow
the real database transactions: every root transaction and every SAVEPOINT
gets its own context, whoever opened it (a unit of work, ``session.begin()``,
``begin_nested()`` or autobegin). The internal subtransactions a flush opens
are ignored.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import event
from sqlalchemy.orm import Session, SessionTransaction, scoped_session

from .dispatcher import Dispatcher
from .listener import ContextListener

log = logging.getLogger(__name__)

BINDING_KEY = "when_committed.binding"


class SessionBinding:
    """
    Deliver a session's transaction lifecycle to its dispatcher.

    ``after_commit`` marks the transaction that committed (the root or a
    released SAVEPOINT); ``after_transaction_end`` then resolves its context as
    committed, or as rolled back when no commit was seen.
    """

    def __init__(self, session: Session) -> None:
        self.dispatcher = Dispatcher()
        self._listeners: dict[SessionTransaction, ContextListener] = {}
        self._committed: set[SessionTransaction] = set()
        self._install_listeners(session)
        self._adopt(session)

    def reset(self) -> int:
        """Forget tracked transactions and discard every open context."""
        self._listeners.clear()
        self._committed.clear()
        return self.dispatcher.reset()

    # ----------------------------- Internals ----------------------------------

    def _install_listeners(self, session: Session) -> None:
        event.listen(session, "after_transaction_create", self._after_transaction_create)
        event.listen(session, "after_commit", self._after_commit)
        event.listen(session, "after_transaction_end", self._after_transaction_end)

    def _adopt(self, session: Session) -> None:
        # Transactions already in progress when the binding is created.
        transaction = session.get_nested_transaction() or session.get_transaction()
        chain = []
        while transaction is not None:
            if self._is_tracked(transaction):
                chain.append(transaction)
            transaction = transaction.parent
        for transaction in reversed(chain):
            self._listeners[transaction] = self.dispatcher.begin()
        if chain:
            log.debug("Adopted %d open transaction(s)", len(chain), extra={"depth": len(chain) - 1})

    @staticmethod
    def _is_tracked(transaction: SessionTransaction) -> bool:
        return transaction.parent is None or transaction.nested

    def _after_transaction_create(self, session: Session, transaction: SessionTransaction) -> None:
        if self._is_tracked(transaction):
            self._listeners[transaction] = self.dispatcher.begin()

    def _after_commit(self, session: Session) -> None:
        # Still the committing transaction: close() has not run yet.
        transaction = session.get_nested_transaction() or session.get_transaction()
        if transaction is not None:
            self._committed.add(transaction)

    def _after_transaction_end(self, session: Session, transaction: SessionTransaction) -> None:
        listener = self._listeners.pop(transaction, None)
        if listener is None:
            return
        if transaction in self._committed:
            self._committed.discard(transaction)
            listener.before_committed()
            listener.committed()
        else:
            listener.rolled_back()


def binding_for(session: Any) -> SessionBinding:
    """
    Return the binding stored on ``session``, creating it on first use.

    The binding lives in ``Session.info`` so it is created with the session
    and discarded with it. A ``scoped_session`` resolves to its current
    session, so both flavours share one binding.

    :param session: SQLAlchemy ``Session`` or ``scoped_session``.
    :rtype: SessionBinding
    """
    if isinstance(session, scoped_session):
        session = session()
    binding = session.info.get(BINDING_KEY)
    if binding is None:
        binding = session.info[BINDING_KEY] = SessionBinding(session)
    return binding


def dispatcher_for(session: Any) -> Dispatcher:
    """Return the dispatcher bound to ``session``'s transactions."""
    return binding_for(session).dispatcher
