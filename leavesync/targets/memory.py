"""In-memory absence target.

This module provides MemoryTarget, a simple target backed by in-memory
storage. It's useful for testing, dry experiments and ephemeral calendars.
"""

from collections.abc import Iterable, Mapping

from typing_extensions import override

from leavesync.collection import IntervalCollection
from leavesync.interval import Interval
from leavesync.targets import AbsenceTarget, WriteResult


class MemoryTarget(AbsenceTarget):
    """Absence target keeping a list of intervals per person.

    Attributes:
        _absences: Stored intervals keyed by lower-cased e-mail address
    """

    def __init__(self, absences: Mapping[str, Iterable[Interval]] | None = None):
        """Initialize an empty or pre-populated target.

        Args:
            absences: Optional initial intervals keyed by e-mail address
        """
        self._absences: dict[str, list[Interval]] = {}
        for email, intervals in (absences or {}).items():
            self._absences[email.lower()] = list(intervals)

    @override
    def knows(self, email: str) -> bool:
        return email.lower() in self._absences

    @override
    def fetch(self, email: str) -> IntervalCollection[Interval]:
        return IntervalCollection(self._absences.get(email.lower(), ()))

    @override
    def _add_interval(self, email: str, interval: Interval) -> WriteResult:
        self._absences.setdefault(email.lower(), []).append(interval)
        return WriteResult(success=True, interval=interval)

    @override
    def _remove_interval(self, email: str, interval: Interval) -> WriteResult:
        stored = self._absences.get(email.lower(), [])
        try:
            stored.remove(interval)
        except ValueError:
            return WriteResult(
                success=False,
                interval=interval,
                error=ValueError(f"{interval} not found for {email}"),
            )
        return WriteResult(success=True, interval=interval)
