"""Half-day resolution absence intervals.

Every boundary of an interval is projected onto a half-day slot, numbered
``2 * date.toordinal()`` for the morning and one more for the afternoon. An
interval then covers the inclusive slot range ``[start_slot, end_slot]`` and
all of the predicates below reduce to integer comparisons on those slots.
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum, StrEnum
from typing import Any, ClassVar, Self

from leavesync.errors import MergeError, ValidationError


class Half(StrEnum):
    """Which half of a calendar day a boundary falls on."""

    AM = "am"
    PM = "pm"


class Kind(StrEnum):
    """Built-in absence kinds."""

    HOLIDAY = "holiday"
    SICKNESS = "sickness"
    OTHER_LEAVE = "other_leave"


class Relation(Enum):
    """Temporal relationship of one interval to another."""

    COVERS = "covers"
    COVERED_BY = "covered_by"
    OVERLAPS = "overlaps"
    ADJACENT = "adjacent"
    DISJOINT = "disjoint"


def parse_half(value: Any) -> Half:
    """Read a meridiem given as a Half or an "am"/"pm" string in any case."""
    try:
        return Half(value.lower())
    except (AttributeError, ValueError):
        raise ValidationError(f"{value} is not a recognized meridiem") from None


def _slot(day: date, half: Half) -> int:
    return 2 * day.toordinal() + (0 if half is Half.AM else 1)


@dataclass(frozen=True, kw_only=True)
class Interval:
    """A contiguous absence of one kind.

    Subclasses may widen ``kinds`` to accept additional vocabulary::

        @dataclass(frozen=True, kw_only=True)
        class TrainingInterval(Interval):
            kinds = Interval.kinds | {"training"}
    """

    kinds: ClassVar[frozenset[str]] = frozenset(Kind)

    kind: str
    start_date: date
    end_date: date
    start_half: Half = Half.AM
    end_half: Half = Half.PM

    def __post_init__(self) -> None:
        if not isinstance(self.kind, str) or self.kind not in self.kinds:
            raise ValidationError(f"{self.kind} is not a recognized absence kind")
        for value in (self.start_date, self.end_date):
            if not isinstance(value, date) or isinstance(value, datetime):
                raise ValidationError(f"{value} is not a date")

        # Frozen: normalise the halves in place
        object.__setattr__(self, "start_half", parse_half(self.start_half))
        object.__setattr__(self, "end_half", parse_half(self.end_half))

        if self.start_slot > self.end_slot:
            raise ValidationError("An absence cannot end before it starts")

    def __str__(self) -> str:
        return (
            f"{self.kind}({self.start_date} {self.start_half.upper()}"
            f"→{self.end_date} {self.end_half.upper()})"
        )

    @property
    def start_slot(self) -> int:
        return _slot(self.start_date, self.start_half)

    @property
    def end_slot(self) -> int:
        return _slot(self.end_date, self.end_half)

    @property
    def half_days(self) -> int:
        """Number of half days the interval spans."""
        return self.end_slot - self.start_slot + 1

    @property
    def has_half_day_boundary(self) -> bool:
        """True when the interval starts in an afternoon or ends in a morning."""
        return self.start_half is Half.PM or self.end_half is Half.AM

    def matches_type(self, other: "Interval") -> bool:
        return self.kind == other.kind

    def starts_before(self, other: "Interval") -> bool:
        return self.start_slot < other.start_slot

    def ends_after(self, other: "Interval") -> bool:
        return self.end_slot > other.end_slot

    def covers(self, other: "Interval") -> bool:
        return not other.starts_before(self) and not other.ends_after(self)

    def overlaps(self, other: "Interval") -> bool:
        if self.covers(other) or covered_by(self, other):
            return False
        return (
            self.start_slot <= other.end_slot and other.start_slot <= self.end_slot
        )

    def adjacent_to(self, other: "Interval") -> bool:
        return (
            self.end_slot + 1 == other.start_slot
            or other.end_slot + 1 == self.start_slot
        )

    def mergeable_with(self, other: "Interval") -> bool:
        if not self.matches_type(other):
            return False
        return (
            self.adjacent_to(other)
            or self.overlaps(other)
            or self.covers(other)
            or covered_by(self, other)
        )

    def merge_with(self, other: Self) -> Self:
        """Combine two mergeable intervals into the span covering both.

        When one interval already covers the other, that same object is
        returned rather than a copy.

        Raises:
            MergeError: If the intervals are not mergeable.
        """
        if not self.mergeable_with(other):
            raise MergeError("Cannot merge these intervals")
        if self.covers(other):
            return self
        if covered_by(self, other):
            return other

        first = self if self.starts_before(other) else other
        last = self if self.ends_after(other) else other
        return type(self)(
            kind=self.kind,
            start_date=first.start_date,
            start_half=first.start_half,
            end_date=last.end_date,
            end_half=last.end_half,
        )


def covered_by(interval: Interval, other: Interval) -> bool:
    """Return True if ``other`` covers ``interval``."""
    return other.covers(interval)


def relate(interval: Interval, other: Interval) -> Relation:
    """Classify how ``interval`` sits relative to ``other``.

    Exactly one relation is reported. Equal spans report ``COVERS``.
    """
    if interval.covers(other):
        return Relation.COVERS
    if covered_by(interval, other):
        return Relation.COVERED_BY
    if interval.overlaps(other):
        return Relation.OVERLAPS
    if interval.adjacent_to(other):
        return Relation.ADJACENT
    return Relation.DISJOINT
