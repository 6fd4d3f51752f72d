"""
Event model for deployment lifecycle events.

Events are immutable; their canonical order is `index`, never arrival time.
"""

from dataclasses import dataclass

from .errors import InvalidRangeError


@dataclass(frozen=True)
class DeploymentEvent:
    """
    Immutable lifecycle event.

    Fields:
        index: Producer-assigned sequence number, unique within a deployment
        description: Human-readable text prefixed with "[host/address] - "
        timestamp: Assignment time in epoch seconds (diagnostics only)
    """
    index: int
    description: str
    timestamp: float = 0.0

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "description": self.description,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class RangeQuery:
    """
    Inclusive index window [start, end].

    A window with start > end is degenerate: empty and vacuously complete.
    """
    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < 0:
            raise InvalidRangeError(
                f"range bounds must be non-negative, got [{self.start}, {self.end}]"
            )

    @property
    def is_empty(self) -> bool:
        return self.start > self.end

    @property
    def size(self) -> int:
        """Number of indices in the window. Can exceed sys.maxsize."""
        if self.is_empty:
            return 0
        return self.end - self.start + 1

    def indices(self) -> range:
        return range(self.start, self.end + 1)
