"""Abstract interface for document number counters."""

from abc import ABC, abstractmethod


class ISequenceStore(ABC):
    """Per-prefix, per-year counters backing document numbers."""

    @abstractmethod
    async def next_value(self, prefix: str, year: int) -> int:
        """
        Atomically increment and return the counter for (prefix, year).

        The first call for a pair returns 1. Two callers never receive the
        same value; values consumed by a failed operation are not reused.
        """
