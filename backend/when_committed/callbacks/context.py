"""One (possibly nested) transaction scope and the callbacks it owns."""

from __future__ import annotations

import logging

from .errors import InactiveTransactionError
from .record import CallbackRecord

log = logging.getLogger(__name__)


class TransactionContext:
    """
    Own the ordered pending callbacks of a transaction scope.

    ``parent`` is navigational only; the :class:`TransactionStack` owns the
    chain of contexts. Records keep their registration order, and records
    migrated from a committed child are appended after the ones already here.

    :param parent: Enclosing context, ``None`` for the outermost one.
    :type parent: TransactionContext | None
    """

    def __init__(self, parent: TransactionContext | None = None) -> None:
        self.parent = parent
        self.depth: int = 0 if parent is None else parent.depth + 1
        self.pending_records: list[CallbackRecord] = []
        self.open = True

    @property
    def is_outermost(self) -> bool:
        return self.parent is None

    def attach(self, record: CallbackRecord) -> None:
        """Append ``record`` to this context.

        :raises InactiveTransactionError: If the context already resolved.
        """
        if not self.open:
            raise InactiveTransactionError()
        self.pending_records.append(record)

    def close(self) -> None:
        self.open = False

    def on_committing(self) -> list[CallbackRecord]:
        """
        Prepare to finalize this context as committed.

        A nested context transfers every pending record to its parent and
        keeps nothing; the parent decides their fate later. The outermost
        context keeps its records, which are now due.

        :returns: Records handed to the parent (empty for the outermost).
        :rtype: list[CallbackRecord]
        """
        if self.parent is None:
            return []
        moved = [record for record in self.pending_records if record.pending]
        self.pending_records = []
        self.parent.pending_records.extend(moved)
        if moved:
            log.debug(
                "Handed %d callback(s) up from depth %d",
                len(moved),
                self.depth,
                extra={"depth": self.depth, "pending": len(self.parent.pending_records)},
            )
        return moved

    def on_committed(self, run_callbacks: bool = True) -> None:
        """
        Resolve the due records in registration order.

        Stops at the first callback error: later records stay pending and the
        error propagates to the caller.
        """
        for record in self.pending_records:
            try:
                record.resolve(run_callbacks)
            except Exception:
                log.error(
                    "Deferred callback %r failed; abandoning the remaining callbacks",
                    record,
                    exc_info=True,
                    extra={"depth": self.depth, "callback": repr(record)},
                )
                raise

    def on_rolled_back(self) -> int:
        """Discard every record, including those inherited from children.

        :returns: Number of callbacks discarded.
        """
        discarded = 0
        for record in self.pending_records:
            if record.pending:
                record.discard()
                discarded += 1
        if discarded:
            log.debug(
                "Discarded %d callback(s) at depth %d",
                discarded,
                self.depth,
                extra={"depth": self.depth},
            )
        return discarded

    def __repr__(self) -> str:
        state = "open" if self.open else "closed"
        return f"<TransactionContext depth={self.depth} {state} pending={len(self.pending_records)}>"
