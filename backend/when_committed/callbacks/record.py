"""Single registered callback and its run-state."""

from __future__ import annotations

import enum
from collections.abc import Callable
from typing import Any

Callback = Callable[[], Any]


class CallbackState(str, enum.Enum):
    """Lifecycle of a :class:`CallbackRecord`."""

    PENDING = "pending"
    RAN = "ran"
    SKIPPED = "skipped"


class CallbackRecord:
    """
    Wrap one deferred callback.

    A record is owned by exactly one transaction context at a time and is
    resolved at most once: it either runs, is skipped by a cleanup pass, or is
    discarded by a rollback.

    :param callback: Zero-argument callable to run after commit.
    :type callback: Callable[[], Any]
    """

    __slots__ = ("callback", "state")

    def __init__(self, callback: Callback) -> None:
        if not callable(callback):
            raise TypeError(f"callback must be callable, got {type(callback).__name__}")
        self.callback = callback
        self.state = CallbackState.PENDING

    @property
    def pending(self) -> bool:
        return self.state is CallbackState.PENDING

    def resolve(self, run_callbacks: bool = True) -> None:
        """
        Run or skip the callback.

        :param run_callbacks: ``False`` during the manager's cleanup pass; the
            record is then skipped without invoking the callback.
        :raises Exception: Whatever the callback raises. The record stays
            ``ran`` and is never retried.
        """
        if not self.pending:
            return
        if not run_callbacks:
            self.state = CallbackState.SKIPPED
            return
        # Mark first so a failing callback is never attempted twice.
        self.state = CallbackState.RAN
        self.callback()

    def discard(self) -> None:
        """Drop the callback without running it (rollback path)."""
        if self.pending:
            self.state = CallbackState.SKIPPED

    def __repr__(self) -> str:
        name = getattr(self.callback, "__qualname__", None) or repr(self.callback)
        return f"<CallbackRecord {name} state={self.state.value}>"
