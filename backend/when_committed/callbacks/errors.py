"""
Exceptions raised by the deferred-callback core.

These exceptions are **framework-agnostic**: they never import Flask or
SQLAlchemy, so the core can be exercised without a real transaction manager.
Errors raised by user callbacks are never wrapped; they propagate unchanged.
"""

from __future__ import annotations


class WhenCommittedError(Exception):
    """Base class for all errors raised by this package."""

    pass


class RequiresTransactionError(WhenCommittedError):
    """
    Raised when a callback is registered while no transaction is open.

    The caller can recover either by wrapping the call in a transaction or by
    explicitly opting into immediate execution.
    """

    HELP = (
        "Specify `run_now_if_no_transaction=True` if you want to allow the "
        "callback to run immediately when there is no transaction."
    )

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.HELP)


class InactiveTransactionError(WhenCommittedError):
    """Raised when a callback is attached to a context that already resolved."""

    def __init__(self, message: str = "Transaction context is no longer open") -> None:
        super().__init__(message)
