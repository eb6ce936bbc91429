"""Writable destinations for absence changes.

This module provides the abstract base class for systems that receive the
output of a reconciliation, along with implementations for different
backends.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass

from leavesync.collection import IntervalCollection
from leavesync.interval import Interval


@dataclass(frozen=True)
class WriteResult:
    """Result of a write operation (add/remove).

    Attributes:
        success: True if the operation succeeded, False otherwise
        interval: The interval that was written or removed
        error: The exception that occurred if failed, None if successful
    """

    success: bool
    interval: Interval
    error: Exception | None = None


class AbsenceTarget(ABC):
    """Abstract base class for systems that hold a person's absences.

    Provides the dispatch logic for adding and removing intervals, with
    backend-specific implementations handling the actual writes. People are
    identified by their e-mail address.
    """

    @abstractmethod
    def fetch(self, email: str) -> IntervalCollection[Interval]:
        """Return every absence currently stored for ``email``."""
        pass

    def knows(self, email: str) -> bool:
        """Return True if the target has an account for ``email``."""
        return True

    def add(
        self, email: str, intervals: Interval | Iterable[Interval]
    ) -> Iterable[WriteResult]:
        """Create absences for a person.

        Args:
            email: The person the absences belong to
            intervals: Single interval or iterable of intervals to create

        Returns:
            Iterator of WriteResult objects, one per interval
        """
        if isinstance(intervals, Interval):
            intervals = (intervals,)
        for interval in intervals:
            yield self._add_interval(email, interval)

    def remove(
        self, email: str, intervals: Interval | Iterable[Interval]
    ) -> Iterable[WriteResult]:
        """Delete absences for a person.

        Args:
            email: The person the absences belong to
            intervals: Single interval or iterable of intervals to delete

        Returns:
            Iterator of WriteResult objects, one per interval
        """
        if isinstance(intervals, Interval):
            intervals = (intervals,)
        for interval in intervals:
            yield self._remove_interval(email, interval)

    @abstractmethod
    def _add_interval(self, email: str, interval: Interval) -> WriteResult:
        """Backend-specific: create a single absence."""
        pass

    @abstractmethod
    def _remove_interval(self, email: str, interval: Interval) -> WriteResult:
        """Backend-specific: delete a single absence.

        Intervals are matched by structural equality.
        """
        pass


__all__ = ["AbsenceTarget", "WriteResult"]
