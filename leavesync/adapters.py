"""Conversion of raw absence records from remote systems into intervals.

Two record shapes are understood:

* ``MeridiemAdapter`` reads HR-style records, where a half day at either end
  of an absence is a boolean plus an ``"am"``/``"pm"`` marker.
* ``FlagAdapter`` reads project-tool style records, where half days are plain
  booleans on the start and end of the booking. It can also write intervals
  back into that shape.

Both map the remote system's own leave-type identifiers onto interval kinds.
Records whose type has no mapping are ignored (the adapter returns None).
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

from dateutil.parser import isoparse

from leavesync.collection import IntervalCollection
from leavesync.errors import ValidationError
from leavesync.interval import Half, Interval, parse_half

logger = logging.getLogger(__name__)

Record = Mapping[str, Any]


def parse_date(value: Any) -> date:
    """Read a calendar date from a date object or an ISO-8601 string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return isoparse(value).date()
        except ValueError:
            pass
    raise ValidationError(f"{value} is not a date")


def _required(record: Record, field: str) -> Any:
    try:
        return record[field]
    except KeyError:
        raise ValidationError(f"Record is missing '{field}'") from None


class _Adapter(ABC):
    interval_class: type[Interval] = Interval

    @abstractmethod
    def to_interval(self, record: Record) -> Interval | None:
        """Build an interval from one record, or None if it is ignored."""
        pass

    def load(self, records: Iterable[Record]) -> IntervalCollection[Interval]:
        """Convert every usable record, logging and skipping invalid ones."""
        intervals: list[Interval] = []
        for record in records:
            try:
                interval = self.to_interval(record)
            except ValidationError as exc:
                logger.warning(
                    "Skipping invalid %s record %r: %s",
                    type(self).__name__,
                    record.get("id"),
                    exc,
                )
                continue
            if interval is not None:
                intervals.append(interval)
        return IntervalCollection(intervals)


class MeridiemAdapter(_Adapter):
    """Reads records carrying ``half_start``/``half_end`` plus am/pm markers.

    Args:
        kind_map: Remote leave-type id to interval kind.
        ignored_reasons: Leave reasons whose records are dropped.
        default_kind: Kind used when a record has no leave type, e.g. for a
            feed that only ever returns sickness.
    """

    def __init__(
        self,
        kind_map: Mapping[str, str] | None = None,
        *,
        ignored_reasons: Iterable[str] = (),
        default_kind: str | None = None,
    ):
        self.kind_map: dict[str, str] = {
            str(k): v for k, v in (kind_map or {}).items()
        }
        self.ignored_reasons: frozenset[str] = frozenset(
            str(r) for r in ignored_reasons
        )
        self.default_kind: str | None = default_kind

    def _kind(self, record: Record) -> str | None:
        leave_type = record.get("leave_type", record.get("type"))
        if leave_type is None:
            return self.default_kind
        return self.kind_map.get(str(leave_type))

    def to_interval(self, record: Record) -> Interval | None:
        reason = record.get("leave_reason")
        if reason is not None and str(reason) in self.ignored_reasons:
            return None

        kind = self._kind(record)
        if kind is None:
            return None

        start_date = parse_date(_required(record, "start_date"))
        end_date = parse_date(_required(record, "end_date"))
        half_start = bool(record.get("half_start"))
        half_end = bool(record.get("half_end"))
        start_half = Half.PM if half_start else Half.AM
        end_half = Half.AM if half_end else Half.PM

        if start_date == end_date and (half_start or half_end):
            marker = record.get("half_start_am_pm") or record.get("half_end_am_pm")
            if marker is None:
                raise ValidationError("A single half day must say am or pm")
            start_half = end_half = parse_half(marker)

        return self.interval_class(
            kind=kind,
            start_date=start_date,
            end_date=end_date,
            start_half=start_half,
            end_half=end_half,
        )


class FlagAdapter(_Adapter):
    """Reads and writes records with ``half_day_at_start``/``half_day_at_end``.

    Args:
        event_ids: Interval kind to remote event id.
    """

    def __init__(self, event_ids: Mapping[str, str]):
        self.event_ids: dict[str, str] = {k: str(v) for k, v in event_ids.items()}
        self._kinds: dict[str, str] = {v: k for k, v in self.event_ids.items()}

    def to_interval(self, record: Record) -> Interval | None:
        kind = self._kinds.get(str(_required(record, "event_id")))
        if kind is None:
            return None

        start_date = parse_date(_required(record, "started_on"))
        end_date = parse_date(_required(record, "ended_on"))
        half_at_start = bool(record.get("half_day_at_start"))
        half_at_end = bool(record.get("half_day_at_end"))

        if start_date == end_date and half_at_start and half_at_end:
            # Older bookings mark a lone half day with both flags
            start_half, end_half = Half.AM, Half.AM
        else:
            start_half = Half.PM if half_at_start else Half.AM
            end_half = Half.AM if half_at_end else Half.PM

        return self.interval_class(
            kind=kind,
            start_date=start_date,
            end_date=end_date,
            start_half=start_half,
            end_half=end_half,
        )

    def to_record(self, interval: Interval) -> dict[str, Any]:
        """Express an interval as a record for the remote system."""
        try:
            event_id = self.event_ids[interval.kind]
        except KeyError:
            raise ValidationError(
                f"No event id configured for {interval.kind}"
            ) from None
        return {
            "event_id": event_id,
            "started_on": interval.start_date.isoformat(),
            "ended_on": interval.end_date.isoformat(),
            "half_day_at_start": interval.start_half is Half.PM,
            "half_day_at_end": interval.end_half is Half.AM,
        }
