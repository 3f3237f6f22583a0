"""
Timeline errors.

Every mutator and store operation raises one of these to its immediate
caller. Nothing here is retried internally; the API layer maps each class to
a client-facing status code.
"""

from datetime import date


class TimelineError(Exception):
    """Base class for all timeline failures."""

    pass


class IOFailure(TimelineError):
    """Underlying filesystem error (missing permissions, full disk, ...)."""

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class DecodeFailure(TimelineError):
    """An existing record could not be parsed."""

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class OverlapConflict(TimelineError):
    """A candidate block overlaps blocks already in a day record."""

    def __init__(self, candidate, conflicts: list):
        self.candidate = candidate
        self.conflicts = list(conflicts)
        first = self.conflicts[0] if self.conflicts else None
        super().__init__(
            f"Block {candidate.start.isoformat()} - {candidate.end.isoformat()} "
            f"overlaps {len(self.conflicts)} existing block(s)"
            + (f", first: {first.start.isoformat()} - {first.end.isoformat()}" if first else "")
        )


class NotFound(TimelineError):
    """A split/adjust locator matched no block in the day record."""

    def __init__(self, day: date, start, end):
        self.day = day
        self.start = start
        self.end = end
        super().__init__(
            f"No block {start.isoformat()} - {end.isoformat()} in record for {day.isoformat()}"
        )


class InvalidBlock(TimelineError, ValueError):
    """Caller supplied bounds that cannot form a valid block."""

    pass
