"""
SQLAlchemy implementation of UnitOfWork that drives deferred callbacks.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from flask import current_app, has_app_context

from when_committed.callbacks import CallbackRecord, dispatcher_for
from when_committed.callbacks.record import Callback
from when_committed.uow.base import Rollback, UnitOfWork

DEPTH_KEY = "when_committed.uow_depth"


class SQLAlchemyUnitOfWork(UnitOfWork):
    """
    SQLAlchemy-backed UoW, using the Flask-scoped session by default.

    The session's dispatcher follows its real transactions, so callbacks run
    when the database commit happens, whoever issues it. The outermost UoW
    on a session owns the transaction: it begins one on enter (unless the
    session already has one) and commits or rolls it back on exit. A UoW
    entered inside another joins that transaction and leaves the decision to
    the owner; errors raised in it, :class:`Rollback` included, propagate.

    Parameters
    ----------
    session:
        SQLAlchemy ``Session`` or ``scoped_session``. Defaults to ``db.session``.
    run_now_if_no_transaction:
        Default for :meth:`when_committed` when the caller passes ``None``.
        When unset, the app's ``WHEN_COMMITTED_RUN_NOW_IF_NO_TRANSACTION``
        setting applies (``False`` outside an app context).
    """

    def __init__(
        self,
        session: Any | None = None,
        *,
        run_now_if_no_transaction: bool | None = None,
    ) -> None:
        if session is None:
            from when_committed.core.extensions import db

            session = db.session
        self.session = session
        self.dispatcher = dispatcher_for(session)
        self.run_now_if_no_transaction = run_now_if_no_transaction
        self._owner = False
        self._active = False

    # ----------------------------- Context Manager -----------------------------

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        depth = self.session.info.get(DEPTH_KEY, 0)
        self.session.info[DEPTH_KEY] = depth + 1
        self._owner = depth == 0
        self._active = True
        self._ensure_transaction()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        # Callbacks run by the commit below may open units of work of their own.
        self.session.info[DEPTH_KEY] = self.session.info.get(DEPTH_KEY, 1) - 1
        self._active = False
        if not self._owner:
            return False
        if exc_type is None:
            self.commit()
            return False
        self.rollback()
        return issubclass(exc_type, Rollback)

    # ----------------------------- Public API ---------------------------------

    def commit(self) -> None:
        """
        Commit the session; the callbacks that became due run right after.

        A failing database commit rolls back (discarding the callbacks) and
        re-raises. A failing callback propagates after the data is committed;
        callbacks registered after it do not run.
        """
        try:
            self.session.commit()
        except Exception:
            self.rollback()
            raise

    def rollback(self) -> None:
        """Roll back the session and discard the pending callbacks."""
        self.session.rollback()

    @contextmanager
    def nested(self) -> Iterator[SQLAlchemyUnitOfWork]:
        """
        Run a block inside a SAVEPOINT.

        Callbacks registered in the block move to the enclosing transaction when
        the savepoint is released; they are discarded when it rolls back.
        Raising :class:`Rollback` rolls back only the savepoint.
        """
        try:
            with self.session.begin_nested():
                yield self
        except Rollback:
            pass

    def when_committed(
        self,
        callback: Callback,
        run_now_if_no_transaction: bool | None = None,
    ) -> CallbackRecord | None:
        """
        Defer ``callback`` until the outermost transaction commits.

        Inside the ``with`` block a transaction is always available: after an
        explicit :meth:`commit` the next one begins here.
        """
        if self._active:
            self._ensure_transaction()
        if run_now_if_no_transaction is None:
            run_now_if_no_transaction = self._default_run_now()
        return self.dispatcher.register_deferred(callback, run_now_if_no_transaction)

    # ----------------------------- Internals ----------------------------------

    def _default_run_now(self) -> bool:
        if self.run_now_if_no_transaction is not None:
            return self.run_now_if_no_transaction
        if has_app_context():
            return bool(current_app.config.get("WHEN_COMMITTED_RUN_NOW_IF_NO_TRANSACTION", False))
        return False

    def _ensure_transaction(self) -> None:
        if not self.session.in_transaction():
            self.session.begin()
