"""Unit tests for :class:`CallbackRecord`."""

from __future__ import annotations

import pytest
from when_committed.callbacks import CallbackRecord, CallbackState

from tests.helpers.jobs import Catastrophe


class TestCallbackRecord:
    def test_starts_pending(self):
        record = CallbackRecord(lambda: None)

        assert record.state is CallbackState.PENDING
        assert record.pending

    def test_rejects_non_callable(self):
        with pytest.raises(TypeError, match="callable"):
            CallbackRecord("not a function")  # type: ignore[arg-type]

    def test_resolve_runs_callback_once(self, jobs):
        """
        GIVEN a pending record
        WHEN it is resolved twice
        THEN the callback runs exactly once and the record is ``ran``
        """
        record = CallbackRecord(lambda: jobs.enqueue("work"))

        record.resolve(True)
        record.resolve(True)

        assert jobs.jobs == ["work"]
        assert record.state is CallbackState.RAN

    def test_resolve_without_running_skips(self, jobs):
        record = CallbackRecord(lambda: jobs.enqueue("work"))

        record.resolve(False)
        record.resolve(True)

        assert jobs.jobs == []
        assert record.state is CallbackState.SKIPPED

    def test_failing_callback_is_not_retried(self):
        calls = []

        def boom():
            calls.append(1)
            raise Catastrophe()

        record = CallbackRecord(boom)

        with pytest.raises(Catastrophe):
            record.resolve(True)
        record.resolve(True)

        assert calls == [1]
        assert record.state is CallbackState.RAN

    def test_discard_never_invokes(self, jobs):
        record = CallbackRecord(lambda: jobs.enqueue("work"))

        record.discard()
        record.resolve(True)

        assert jobs.jobs == []
        assert record.state is CallbackState.SKIPPED

    def test_discard_after_run_keeps_ran(self):
        record = CallbackRecord(lambda: None)
        record.resolve(True)

        record.discard()

        assert record.state is CallbackState.RAN
