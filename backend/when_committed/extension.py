"""Flask extension exposing deferred callbacks for the app's SQLAlchemy session."""

from __future__ import annotations

import logging
from typing import Any

from flask import Flask, current_app

from when_committed.callbacks import CallbackRecord, Dispatcher, dispatcher_for
from when_committed.callbacks.record import Callback
from when_committed.callbacks.session import BINDING_KEY

log = logging.getLogger(__name__)

EXTENSION_KEY = "when_committed"


class WhenCommitted:
    """
    Register callbacks against the Flask-scoped session's transactions.

    Usage::

        when_committed = WhenCommitted()
        when_committed.init_app(app)

        with SQLAlchemyUnitOfWork():
            when_committed.when_committed(lambda: queue.enqueue("welcome_email"))

    Parameters
    ----------
    app: flask.Flask | None
        Application to initialise immediately (optional).
    session: Any | None
        SQLAlchemy session or ``scoped_session``. Defaults to
        ``db.session`` from :mod:`when_committed.core.extensions`.
    """

    def __init__(self, app: Flask | None = None, *, session: Any | None = None) -> None:
        self._session = session
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """Apply configuration defaults and install the teardown hook."""
        app.config.setdefault("WHEN_COMMITTED_RUN_NOW_IF_NO_TRANSACTION", False)
        app.config.setdefault("WHEN_COMMITTED_DISCARD_ON_TEARDOWN", True)
        app.extensions[EXTENSION_KEY] = self
        app.teardown_appcontext(self._teardown)

    @property
    def session(self) -> Any:
        if self._session is not None:
            return self._session
        from when_committed.core.extensions import db

        return db.session

    @property
    def dispatcher(self) -> Dispatcher:
        return dispatcher_for(self.session)

    def when_committed(
        self,
        callback: Callback,
        run_now_if_no_transaction: bool | None = None,
    ) -> CallbackRecord | None:
        """Defer ``callback`` until the session's outermost transaction commits.

        When ``run_now_if_no_transaction`` is ``None`` the app's
        ``WHEN_COMMITTED_RUN_NOW_IF_NO_TRANSACTION`` setting decides.
        """
        if run_now_if_no_transaction is None:
            run_now_if_no_transaction = current_app.config.get(
                "WHEN_COMMITTED_RUN_NOW_IF_NO_TRANSACTION", False
            )
        return self.dispatcher.register_deferred(callback, run_now_if_no_transaction)

    def _teardown(self, exc: BaseException | None) -> None:
        if not current_app.config.get("WHEN_COMMITTED_DISCARD_ON_TEARDOWN", True):
            return
        session = self.session
        # Avoid creating a session just to inspect it.
        registry = getattr(session, "registry", None)
        if registry is not None and not registry.has():
            return
        binding = session.info.get(BINDING_KEY)
        if binding is None:
            return
        leftover = binding.reset()
        if leftover:
            log.warning(
                "Discarded %d callback(s) left pending at teardown",
                leftover,
                extra={"pending": leftover},
            )
