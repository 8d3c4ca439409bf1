from when_committed.models.base import PKMixin, ReprMixin, WhenCommittedMixin

__all__ = [
    "PKMixin",
    "ReprMixin",
    "WhenCommittedMixin",
]
