"""Exception types raised by leavesync."""


class LeaveSyncError(Exception):
    """Base error for everything raised by leavesync."""


class ValidationError(LeaveSyncError, ValueError):
    """Raised when an interval or raw record violates an invariant."""


class MergeError(LeaveSyncError):
    """Raised when two intervals that are not mergeable are merged."""
