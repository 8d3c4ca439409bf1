"""Reusable SQLAlchemy mixins for models that defer work until commit."""

from __future__ import annotations

from typing import Any

from flask import has_app_context
from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, mapped_column, object_session

from when_committed.callbacks import CallbackRecord, RequiresTransactionError, dispatcher_for
from when_committed.callbacks.record import Callback


class PKMixin:
    """Expose an integer surrogate primary key column named ``id``.

    Attributes
    ----------
    id:
        Auto-incrementing integer primary key managed by the database.
    """

    id: Mapped[int] = mapped_column(Integer, primary_key=True)


class ReprMixin:
    """Provide a concise ``__repr__`` including the class name and id."""

    def __repr__(self) -> str:
        """Return a short and useful string representation.

        :returns: Debug-friendly ``<ClassName id=...>``.
        :rtype: str
        """
        cls = self.__class__.__name__
        key = getattr(self, "id", None)
        return f"<{cls} id={key}>"


class WhenCommittedMixin:
    """Let a model instance defer a callback until its session commits.

    The callback attaches to the innermost open transaction of the session the
    instance belongs to, whether or not the instance itself has pending
    changes. Any transaction the session has begun counts, including
    ``session.begin()`` blocks and the one it autobegins on first use.
    A transient instance falls back to the Flask-scoped ``db.session``;
    outside an app context it is treated as being outside any transaction.

    Examples
    --------
    >>> class Widget(WhenCommittedMixin, db.Model):
    ...     def schedule_follow_up(self):
    ...         self.when_committed(lambda: jobs.enqueue("important_work"))
    """

    def when_committed(
        self,
        callback: Callback | None = None,
        *,
        run_now_if_no_transaction: bool = False,
    ) -> Any:
        """Defer ``callback`` until the owning transaction commits.

        Called without a callback it returns a decorator; the decorated function
        is returned unchanged::

            @widget.when_committed()
            def notify():
                ...

        :param callback: Zero-argument callable.
        :param run_now_if_no_transaction: Run immediately when no transaction
            is open instead of raising.
        :returns: The pending :class:`CallbackRecord`, ``None`` when the
            callback ran immediately, or the decorator.
        :raises RequiresTransactionError: No open transaction and no opt-in.
        """
        if callback is None:

            def decorator(fn: Callback) -> Callback:
                self.when_committed(fn, run_now_if_no_transaction=run_now_if_no_transaction)
                return fn

            return decorator
        return self._register_when_committed(callback, run_now_if_no_transaction)

    def _register_when_committed(
        self, callback: Callback, run_now_if_no_transaction: bool
    ) -> CallbackRecord | None:
        session = object_session(self)
        if session is None:
            session = self._default_session()
        if session is None:
            if run_now_if_no_transaction:
                callback()
                return None
            raise RequiresTransactionError()
        return dispatcher_for(session).register_deferred(callback, run_now_if_no_transaction)

    @staticmethod
    def _default_session() -> Any:
        if not has_app_context():
            return None
        from when_committed.core.extensions import db

        return db.session
