"""
Abstract Unit of Work contracts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from when_committed.callbacks.record import Callback, CallbackRecord


class Rollback(Exception):
    """
    Raise inside a unit of work (or one of its savepoints) to roll it back
    silently; the exception does not propagate past that scope.
    """


class UnitOfWork(ABC):
    """
    Coordinates a transactional boundary for a use-case.

    Responsibilities:
    - Commit on success, rollback on error.
    - Callbacks registered through :meth:`when_committed` run only after the
      outermost commit and are dropped when it rolls back.
    """

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...
    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> Any: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...
    @abstractmethod
    def when_committed(
        self,
        callback: Callback,
        run_now_if_no_transaction: bool | None = None,
    ) -> CallbackRecord | None: ...
