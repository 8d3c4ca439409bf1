"""
Notification protocol between a transaction manager and this package.

A manager enrolls one listener per transaction it opens and later delivers
exactly one of ``committed``, ``rolled_back`` or ``handed_up_to_parent`` to it
(optionally preceded by ``before_committed``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .context import TransactionContext
    from .dispatcher import Dispatcher


@runtime_checkable
class TransactionListener(Protocol):
    def before_committed(self) -> None: ...
    def committed(self, run_callbacks: bool = True) -> None: ...
    def rolled_back(self) -> None: ...
    def handed_up_to_parent(self) -> None: ...
    def is_eligible_for_callbacks(self) -> bool: ...


class ContextListener:
    """
    Enrollment object bound to a single transaction context.

    Every event is forwarded to the dispatcher for *this* context, so a
    manager that re-delivers an event after the context resolved triggers
    nothing.
    """

    __slots__ = ("dispatcher", "context")

    def __init__(self, dispatcher: Dispatcher, context: TransactionContext) -> None:
        self.dispatcher = dispatcher
        self.context = context

    def before_committed(self) -> None:
        self.dispatcher.before_committed(self.context)

    def committed(self, run_callbacks: bool = True) -> None:
        self.dispatcher.committed(self.context, run_callbacks=run_callbacks)

    def rolled_back(self) -> None:
        self.dispatcher.rolled_back(self.context)

    def handed_up_to_parent(self) -> None:
        self.dispatcher.handed_up_to_parent(self.context)

    def is_eligible_for_callbacks(self) -> bool:
        return self.dispatcher.is_eligible_for_callbacks()

    def __repr__(self) -> str:
        return f"<ContextListener {self.context!r}>"
