"""
Exception types for deployment event aggregation.
"""


class MalformedLogLineError(ValueError):
    """Raised when a log line does not have the expected event layout."""

    def __init__(self, line: str, reason: str = "missing ' - ' separator") -> None:
        super().__init__(f"malformed log line ({reason}): {line!r}")
        self.line = line
        self.reason = reason


class EventStoreError(Exception):
    """Raised when an event sequence write violates its integrity rules."""
    pass


class InvalidRangeError(ValueError):
    """Raised when a range query has a negative bound."""
    pass
