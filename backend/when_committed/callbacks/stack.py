"""Chain of currently open transaction contexts for one session."""

from __future__ import annotations

from .context import TransactionContext


class TransactionStack:
    """
    Track open contexts, innermost last.

    One stack belongs to one logical unit of execution (a session following a
    single call stack) and is never shared, so it takes no locks.
    """

    def __init__(self) -> None:
        self._contexts: list[TransactionContext] = []

    def __len__(self) -> int:
        return len(self._contexts)

    def __contains__(self, context: object) -> bool:
        return any(c is context for c in self._contexts)

    @property
    def depth(self) -> int:
        return len(self._contexts)

    def current(self) -> TransactionContext | None:
        """Return the innermost open context, or ``None``."""
        return self._contexts[-1] if self._contexts else None

    def is_inside_transaction(self) -> bool:
        return bool(self._contexts)

    def push(self) -> TransactionContext:
        """Open a context nested inside the current one."""
        context = TransactionContext(parent=self.current())
        self._contexts.append(context)
        return context

    def pop(self) -> TransactionContext:
        """Remove and return the innermost context.

        :raises IndexError: If no context is open.
        """
        if not self._contexts:
            raise IndexError("pop from an empty transaction stack")
        return self._contexts.pop()

    def unwind_to(self, context: TransactionContext) -> list[TransactionContext]:
        """
        Pop every context above ``context`` and ``context`` itself.

        :returns: Popped contexts, innermost first (``context`` is last).
        :raises ValueError: If ``context`` is not on this stack.
        """
        if context not in self:
            raise ValueError(f"{context!r} is not on this transaction stack")
        popped: list[TransactionContext] = []
        while True:
            top = self._contexts.pop()
            popped.append(top)
            if top is context:
                return popped

    def clear(self) -> list[TransactionContext]:
        """Pop all contexts, innermost first."""
        popped = list(reversed(self._contexts))
        self._contexts.clear()
        return popped
