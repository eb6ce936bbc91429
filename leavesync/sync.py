"""Bring each person's absences on a target in line with their source absences.

A run loads every person's canonical absences, looks the person up on the
target (trying their e-mail aliases in turn), diffs the two collections and
applies the resulting deletions and creations. In a dry run the changes are
only logged.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date

from leavesync.collection import Changes, IntervalCollection
from leavesync.errors import LeaveSyncError
from leavesync.interval import Interval
from leavesync.targets import AbsenceTarget, WriteResult

logger = logging.getLogger(__name__)


def resolve_aliases(
    email: str, alias_groups: Iterable[Sequence[str]]
) -> tuple[str, ...]:
    """Return every address known to belong to the owner of ``email``.

    The address itself always comes first, followed by the other members of
    the first alias group that contains it.
    """
    wanted = email.lower()
    for group in alias_groups:
        members = [m.lower() for m in group]
        if wanted in members:
            return (wanted, *(m for m in members if m != wanted))
    return (wanted,)


@dataclass(frozen=True)
class Person:
    """Someone whose absences are synchronised.

    Attributes:
        email: Primary e-mail address on the source system
        absences: Canonical absences from the source system
        aliases: Other addresses the person may be known by on the target
    """

    email: str
    absences: IntervalCollection[Interval] = field(
        default_factory=IntervalCollection
    )
    aliases: tuple[str, ...] = ()

    @classmethod
    def from_source(
        cls,
        email: str,
        absences: IntervalCollection[Interval],
        alias_groups: Iterable[Sequence[str]] = (),
    ) -> "Person":
        identities = resolve_aliases(email, alias_groups)
        return cls(email=email, absences=absences, aliases=identities[1:])

    @property
    def identities(self) -> tuple[str, ...]:
        seen = dict.fromkeys(a.lower() for a in (self.email, *self.aliases))
        return tuple(seen)


@dataclass(frozen=True)
class SyncReport:
    """What a sync did, or would have done, for one person."""

    person: Person
    email: str | None
    changes: Changes[Interval]
    results: tuple[WriteResult, ...] = ()
    dry_run: bool = True
    skipped: bool = False

    @property
    def failures(self) -> tuple[WriteResult, ...]:
        return tuple(r for r in self.results if not r.success)


class Synchroniser:
    """Apply source absences to an absence target.

    Args:
        target: Where absences are written.
        dry_run: Only log the changes instead of applying them.
        after: Ignore absences on both sides that end before this date.
        compress: Compress the source before diffing.
        split_half_days: Split half days out of the source before diffing,
            for targets that store half days as separate one-day records.
    """

    def __init__(
        self,
        target: AbsenceTarget,
        *,
        dry_run: bool = True,
        after: date | None = None,
        compress: bool = True,
        split_half_days: bool = True,
    ):
        self.target: AbsenceTarget = target
        self.dry_run: bool = dry_run
        self.after: date | None = after
        self.compress: bool = compress
        self.split_half_days: bool = split_half_days

    def sync(self, person: Person) -> SyncReport:
        email = self._find_on_target(person)
        if email is None:
            logger.warning(
                "No target account for %s, skipping",
                person.email,
                extra={"email": person.email},
            )
            empty: IntervalCollection[Interval] = IntervalCollection()
            return SyncReport(
                person=person,
                email=None,
                changes=Changes(added=empty, removed=empty),
                dry_run=self.dry_run,
                skipped=True,
            )

        current = self.target.fetch(email).between(self.after)
        wanted = person.absences.between(self.after)
        changes = wanted.all_changes_from(
            current, compress=self.compress, split_half_days=self.split_half_days
        )

        for action, intervals in (("remove", changes.removed), ("add", changes.added)):
            for interval in intervals:
                logger.info(
                    "%s %s for %s%s",
                    action.capitalize(),
                    interval,
                    email,
                    " (dry run)" if self.dry_run else "",
                    extra={
                        "email": email,
                        "kind": str(interval.kind),
                        "action": action,
                        "dry_run": self.dry_run,
                    },
                )

        if self.dry_run:
            return SyncReport(
                person=person, email=email, changes=changes, dry_run=True
            )

        results = (
            *self.target.remove(email, changes.removed),
            *self.target.add(email, changes.added),
        )
        for result in results:
            if not result.success:
                logger.warning(
                    "Failed to write %s for %s: %s",
                    result.interval,
                    email,
                    result.error,
                    extra={"email": email},
                )

        return SyncReport(
            person=person,
            email=email,
            changes=changes,
            results=results,
            dry_run=False,
        )

    def sync_all(self, people: Iterable[Person]) -> list[SyncReport]:
        """Sync everyone, carrying on past people whose data is unusable."""
        reports = []
        for person in people:
            try:
                reports.append(self.sync(person))
            except LeaveSyncError:
                logger.exception(
                    "Could not sync %s", person.email, extra={"email": person.email}
                )
        return reports

    def _find_on_target(self, person: Person) -> str | None:
        for identity in person.identities:
            if self.target.knows(identity):
                return identity
        return None
