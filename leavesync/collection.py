"""Sorted, immutable collections of absence intervals."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Generic, Self, TypeVar

from leavesync.interval import Half, Interval

Ivl = TypeVar("Ivl", bound=Interval)

_ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class Changes(Generic[Ivl]):
    """Result of diffing two collections.

    Attributes:
        added: Intervals to create on the target
        removed: Intervals to delete from the target
    """

    added: "IntervalCollection[Ivl]"
    removed: "IntervalCollection[Ivl]"

    def __bool__(self) -> bool:
        return bool(self.added) or bool(self.removed)


class IntervalCollection(Generic[Ivl]):
    """Intervals ordered by start date.

    Collections are never modified; every operation returns a new one.
    """

    def __init__(self, intervals: Iterable[Ivl] = ()):
        self._intervals: tuple[Ivl, ...] = tuple(
            sorted(intervals, key=lambda interval: interval.start_date)
        )

    @property
    def intervals(self) -> tuple[Ivl, ...]:
        return self._intervals

    def __iter__(self) -> Iterator[Ivl]:
        return iter(self._intervals)

    def __len__(self) -> int:
        return len(self._intervals)

    def __bool__(self) -> bool:
        return bool(self._intervals)

    def __contains__(self, item: object) -> bool:
        return item in self._intervals

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IntervalCollection):
            return NotImplemented
        return self._intervals == other._intervals

    def __hash__(self) -> int:
        return hash(self._intervals)

    def __repr__(self) -> str:
        inner = ", ".join(str(interval) for interval in self._intervals)
        return f"{type(self).__name__}([{inner}])"

    def __add__(self, other: "IntervalCollection[Ivl]") -> Self:
        return self.union(other)

    def union(self, other: "IntervalCollection[Ivl]") -> Self:
        """Concatenate both collections without deduplicating or merging."""
        return type(self)(self._intervals + other._intervals)

    def of_kind(self, kind: str) -> Self:
        return type(self)(i for i in self._intervals if i.kind == kind)

    def between(self, start: date | None = None, end: date | None = None) -> Self:
        """Keep intervals whose dates touch the inclusive ``[start, end]`` window.

        Either bound may be None for an open-ended window.
        """
        return type(self)(
            interval
            for interval in self._intervals
            if (start is None or interval.end_date >= start)
            and (end is None or interval.start_date <= end)
        )

    def compress(self) -> Self:
        """Merge adjacent, overlapping and nested intervals of the same kind.

        A single pass over each kind in start order: every interval is folded
        into the last accumulated one when the two are mergeable.
        """
        groups: dict[str, list[Ivl]] = {}
        for interval in self._intervals:
            accumulated = groups.setdefault(interval.kind, [])
            if accumulated and accumulated[-1].mergeable_with(interval):
                accumulated[-1] = interval.merge_with(accumulated[-1])
            else:
                accumulated.append(interval)

        return type(self)(
            interval for group in groups.values() for interval in group
        )

    def split_half_days(self) -> Self:
        """Break half-day boundaries out into their own one-day intervals.

        An interval starting in an afternoon yields a one-day afternoon piece
        for its start date, one ending in a morning yields a one-day morning
        piece for its end date, and whatever full days remain between them
        are kept as a single interval.
        """
        pieces: list[Ivl] = []
        for interval in self._intervals:
            if (
                not interval.has_half_day_boundary
                or interval.start_date == interval.end_date
            ):
                pieces.append(interval)
                continue

            splits: list[Ivl] = []
            full_start = interval.start_date
            full_end = interval.end_date
            cls = type(interval)

            if interval.start_half is Half.PM:
                splits.append(
                    cls(
                        kind=interval.kind,
                        start_date=interval.start_date,
                        end_date=interval.start_date,
                        start_half=Half.PM,
                        end_half=Half.PM,
                    )
                )
                full_start = interval.start_date + _ONE_DAY

            if interval.end_half is Half.AM:
                splits.append(
                    cls(
                        kind=interval.kind,
                        start_date=interval.end_date,
                        end_date=interval.end_date,
                        start_half=Half.AM,
                        end_half=Half.AM,
                    )
                )
                full_end = interval.end_date - _ONE_DAY

            if full_start <= full_end:
                splits.append(
                    cls(
                        kind=interval.kind,
                        start_date=full_start,
                        end_date=full_end,
                        start_half=Half.AM,
                        end_half=Half.PM,
                    )
                )

            # dict.fromkeys drops duplicates and keeps the first occurrence
            pieces.extend(dict.fromkeys(splits))

        return type(self)(pieces)

    def all_changes_from(
        self,
        other: "IntervalCollection[Ivl]",
        *,
        compress: bool = False,
        split_half_days: bool = False,
    ) -> Changes[Ivl]:
        """Work out what turns ``other`` into this collection.

        Args:
            other: The collection currently held elsewhere. It is compared
                against as-is and never compressed or split.
            compress: Compress this collection (and the added result) first.
            split_half_days: Split half days out of this collection (and the
                added result) after any compression.

        Returns:
            Changes whose ``added`` holds intervals missing from ``other`` and
            whose ``removed`` holds intervals of ``other`` not in this one.
        """
        ours = self._normalised(compress, split_half_days)

        theirs = set(other._intervals)
        mine = set(ours._intervals)

        added = type(self)(i for i in ours._intervals if i not in theirs)
        added = added._normalised(compress, split_half_days)
        removed = type(self)(i for i in other._intervals if i not in mine)

        return Changes(added=added, removed=removed)

    def _normalised(self, compress: bool, split_half_days: bool) -> Self:
        result = self.compress() if compress else self
        return result.split_half_days() if split_half_days else result
