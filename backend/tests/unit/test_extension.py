"""Unit tests for the ``WhenCommitted`` Flask extension."""

from __future__ import annotations

import logging

import pytest
from flask import Flask
from when_committed import WhenCommitted
from when_committed.callbacks import RequiresTransactionError
from when_committed.core.extensions import when_committed
from when_committed.extension import EXTENSION_KEY
from when_committed.uow import SQLAlchemyUnitOfWork


class TestInitApp:
    def test_registers_extension_and_defaults(self):
        app = Flask(__name__)
        ext = WhenCommitted(app)

        assert app.extensions[EXTENSION_KEY] is ext
        assert app.config["WHEN_COMMITTED_RUN_NOW_IF_NO_TRANSACTION"] is False
        assert app.config["WHEN_COMMITTED_DISCARD_ON_TEARDOWN"] is True

    def test_factory_wires_global_instance(self, app):
        assert app.extensions[EXTENSION_KEY] is when_committed


class TestWhenCommittedHelper:
    def test_shares_dispatcher_with_unit_of_work(self, app, db, session, jobs):
        with SQLAlchemyUnitOfWork() as uow:
            assert when_committed.dispatcher is uow.dispatcher
            when_committed.when_committed(lambda: jobs.enqueue("important_work"))
            assert jobs.jobs == []

        assert jobs.jobs == ["important_work"]

    def test_raises_outside_transaction(self, app, db, session, jobs):
        with pytest.raises(RequiresTransactionError):
            when_committed.when_committed(lambda: jobs.enqueue("important_work"))

    def test_config_opt_in(self, app, db, session, jobs, monkeypatch):
        monkeypatch.setitem(app.config, "WHEN_COMMITTED_RUN_NOW_IF_NO_TRANSACTION", True)

        when_committed.when_committed(lambda: jobs.enqueue("important_work"))

        assert jobs.jobs == ["important_work"]


class TestTeardown:
    def test_discards_contexts_left_open(self, app, db, jobs, caplog):
        """
        GIVEN a transaction context that is never resolved
        WHEN the app context tears down
        THEN its callbacks are discarded and a warning is logged
        """
        with caplog.at_level(logging.WARNING, logger="when_committed.extension"):
            with app.app_context():
                dispatcher = when_committed.dispatcher
                dispatcher.begin()
                when_committed.when_committed(lambda: jobs.enqueue("important_work"))

        assert not dispatcher.is_inside_transaction()
        assert jobs.jobs == []
        assert "left pending at teardown" in caplog.text

    def test_can_be_disabled(self, app, db, jobs, monkeypatch):
        monkeypatch.setitem(app.config, "WHEN_COMMITTED_DISCARD_ON_TEARDOWN", False)

        with app.app_context():
            dispatcher = when_committed.dispatcher
            dispatcher.begin()

        assert dispatcher.is_inside_transaction()
