"""
Log line -> deployment event translation.

Worker log lines look like "<prefix> - <logger.qualified.Name>.<event text>".
Only lines written by the lifecycle event logger carry events.
"""

import re
import time
from typing import Optional

from .core.errors import MalformedLogLineError
from .core.events import DeploymentEvent

SEPARATOR = " - "
EVENT_LOGGER_PATTERN = re.compile(r".*.USMEventLogger.*")
# Leading dotted logger name, e.g. "org.foo.USMEventLogger."
LOGGER_NAME_PATTERN = re.compile(r"^(?:[\w$]+\.)+")


def is_event_line(raw_line: str) -> bool:
    """Return True if the line was written by the lifecycle event logger."""
    return EVENT_LOGGER_PATTERN.match(raw_line) is not None


def translate(raw_line: str, host_name: str, host_address: str) -> str:
    """
    Translate a raw log line into an event description.

    Args:
        raw_line: Log line as emitted by the worker
        host_name: Worker host name
        host_address: Worker host address

    Returns:
        "[host_name/host_address] - <event text>"

    Raises:
        MalformedLogLineError: If the line has no " - " separator

    Example:
        translate("2024-01-01 10:00:00 - org.foo.USMEventLogger.Starting service", "h1", "10.0.0.1")
        -> "[h1/10.0.0.1] - Starting service"
    """
    _, sep, remainder = raw_line.partition(SEPARATOR)
    if not sep:
        raise MalformedLogLineError(raw_line)

    event_text = LOGGER_NAME_PATTERN.sub("", remainder, count=1)
    return f"[{host_name}/{host_address}] - {event_text}"


def log_to_event(
    raw_line: str,
    host_name: str,
    host_address: str,
    index: int,
    timestamp: Optional[float] = None,
) -> DeploymentEvent:
    """Build a DeploymentEvent at `index` from a raw log line."""
    description = translate(raw_line, host_name, host_address)
    return DeploymentEvent(
        index=index,
        description=description,
        timestamp=time.time() if timestamp is None else timestamp,
    )
