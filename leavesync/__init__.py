from .collection import Changes, IntervalCollection
from .errors import LeaveSyncError, MergeError, ValidationError
from .interval import Half, Interval, Kind, Relation, covered_by, relate
from .runner import run
from .sync import Person, SyncReport, Synchroniser
from .targets import AbsenceTarget, WriteResult

__all__ = [
    "Interval",
    "IntervalCollection",
    "Changes",
    "Half",
    "Kind",
    "Relation",
    "relate",
    "covered_by",
    "LeaveSyncError",
    "ValidationError",
    "MergeError",
    "Person",
    "SyncReport",
    "Synchroniser",
    "AbsenceTarget",
    "WriteResult",
    "run",
]
