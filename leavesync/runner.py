"""One synchronisation run driven by ``Settings``.

Raw records from the HR system are grouped per e-mail address. The runner
turns them into people with the configured adapters and alias groups, then
syncs everyone onto the target with the configured dry run and lookback.
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import date

from leavesync.adapters import Record
from leavesync.config import Settings, get_settings
from leavesync.observability import setup_logging
from leavesync.sync import Person, SyncReport, Synchroniser
from leavesync.targets import AbsenceTarget

logger = logging.getLogger(__name__)


def load_people(
    leave: Mapping[str, Iterable[Record]],
    sickness: Mapping[str, Iterable[Record]],
    settings: Settings,
) -> list[Person]:
    """Build a person for every address found in either record feed."""
    leave_adapter = settings.meridiem_adapter()
    sickness_adapter = settings.sickness_adapter()
    people = []
    for email in dict.fromkeys([*leave, *sickness]):
        absences = leave_adapter.load(leave.get(email, ())) + sickness_adapter.load(
            sickness.get(email, ())
        )
        people.append(Person.from_source(email, absences, settings.alias_groups))
    return people


def run(
    leave: Mapping[str, Iterable[Record]],
    target: AbsenceTarget,
    *,
    sickness: Mapping[str, Iterable[Record]] | None = None,
    settings: Settings | None = None,
    today: date | None = None,
) -> list[SyncReport]:
    """Sync every person in ``leave`` and ``sickness`` onto ``target``.

    Args:
        leave: Leave records from the HR system, keyed by e-mail address.
        target: Where absences are written.
        sickness: Sickness records, keyed by e-mail address.
        settings: Defaults to the settings read from the environment.
        today: Reference date for the lookback cutoff. Defaults to today.
    """
    settings = settings or get_settings()
    handler = setup_logging(settings.log_level, settings.log_format)
    try:
        after = settings.cutoff(today or date.today())
        people = load_people(leave, sickness or {}, settings)
        logger.info(
            "Syncing %d people from %s%s",
            len(people),
            after,
            " (dry run)" if settings.dry_run else "",
            extra={"dry_run": settings.dry_run},
        )
        synchroniser = Synchroniser(target, dry_run=settings.dry_run, after=after)
        return synchroniser.sync_all(people)
    finally:
        logging.getLogger("leavesync").removeHandler(handler)
