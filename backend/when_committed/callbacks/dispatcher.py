"""
Registration entry point and lifecycle hooks for deferred callbacks.

The transaction manager calls :meth:`Dispatcher.begin` whenever it opens a
transaction (outermost or savepoint) and later delivers one resolution event
for it. Application code only calls :meth:`Dispatcher.register_deferred`.
"""

from __future__ import annotations

import logging

from .context import TransactionContext
from .errors import RequiresTransactionError
from .listener import ContextListener
from .record import Callback, CallbackRecord
from .stack import TransactionStack

log = logging.getLogger(__name__)


class Dispatcher:
    """
    Attach callbacks to the innermost open transaction and resolve them.

    :param stack: Stack of open contexts; a fresh one is created when omitted.
        Its lifetime should match the session it describes.
    :type stack: TransactionStack | None
    """

    def __init__(self, stack: TransactionStack | None = None) -> None:
        self.stack = stack if stack is not None else TransactionStack()

    # ----------------------------- Registration -------------------------------

    def is_inside_transaction(self) -> bool:
        return self.stack.is_inside_transaction()

    def register_deferred(
        self,
        callback: Callback,
        run_now_if_no_transaction: bool = False,
    ) -> CallbackRecord | None:
        """
        Run ``callback`` once the current transaction finally commits.

        :param callback: Zero-argument callable.
        :param run_now_if_no_transaction: Invoke ``callback`` synchronously when
            no transaction is open instead of raising.
        :returns: The pending record, or ``None`` when the callback ran inline.
        :rtype: CallbackRecord | None
        :raises RequiresTransactionError: No transaction is open and immediate
            execution was not requested.
        """
        context = self.stack.current()
        if context is not None:
            record = CallbackRecord(callback)
            context.attach(record)
            log.debug(
                "Deferred %r until commit",
                record,
                extra={"depth": context.depth, "pending": len(context.pending_records)},
            )
            return record
        if run_now_if_no_transaction:
            callback()
            return None
        raise RequiresTransactionError()

    # ----------------------------- Lifecycle hooks ----------------------------

    def begin(self) -> ContextListener:
        """Open a context (nested if one is already open) and enroll it."""
        context = self.stack.push()
        return ContextListener(self, context)

    def before_committed(self, context: TransactionContext | None = None) -> None:
        """Pre-commit phase; nothing to prepare."""

    def committed(
        self,
        context: TransactionContext | None = None,
        *,
        run_callbacks: bool = True,
    ) -> None:
        """
        Finalize ``context`` (default: innermost) as committed.

        Open contexts nested inside it are handed up first. A nested context
        only migrates its callbacks; the outermost one runs them after it has
        left the stack.

        :param run_callbacks: ``False`` for the manager's cleanup pass, which
            skips every due callback and never raises.
        :raises Exception: The first error raised by a callback; the callbacks
            registered after it stay pending.
        """
        popped = self._unwind(context, "committed")
        if not popped:
            return
        for ctx in popped:
            ctx.close()
            ctx.on_committing()
        target = popped[-1]
        if target.is_outermost:
            target.on_committed(run_callbacks)

    def rolled_back(self, context: TransactionContext | None = None) -> None:
        """Discard the callbacks of ``context`` and of every context inside it."""
        for ctx in self._unwind(context, "rolled_back"):
            ctx.close()
            ctx.on_rolled_back()

    def handed_up_to_parent(self, context: TransactionContext | None = None) -> None:
        """Move the callbacks of ``context`` to its parent without running them."""
        popped = self._unwind(context, "handed_up_to_parent")
        for ctx in popped:
            ctx.close()
            ctx.on_committing()
        if popped and popped[-1].is_outermost and popped[-1].pending_records:
            target = popped[-1]
            log.warning(
                "Outermost transaction resolved without commit or rollback; "
                "discarding %d callback(s)",
                len(target.pending_records),
                extra={"depth": target.depth, "pending": len(target.pending_records)},
            )
            target.on_rolled_back()

    def is_eligible_for_callbacks(self) -> bool:
        return True

    def reset(self) -> int:
        """
        Discard every open context and its callbacks.

        :returns: Number of callbacks discarded.
        :rtype: int
        """
        discarded = 0
        for ctx in self.stack.clear():
            ctx.close()
            discarded += ctx.on_rolled_back()
        return discarded

    # ----------------------------- Internals ----------------------------------

    def _unwind(
        self, context: TransactionContext | None, event: str
    ) -> list[TransactionContext]:
        if context is None:
            context = self.stack.current()
            if context is None:
                log.debug("Ignoring %s: no open transaction", event)
                return []
        if not context.open or context not in self.stack:
            log.debug("Ignoring %s for already resolved %r", event, context)
            return []
        return self.stack.unwind_to(context)
