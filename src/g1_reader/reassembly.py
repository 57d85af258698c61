"""Repair of physical lines in which the JVM started a new record mid-line.

G1 output in 1.6.0_u25 sometimes starts a new record somewhere in a line that
is still being written. The shapes seen are

    ...)<timestamp>: [...          complete concurrent record follows
    ...)<timestamp>:  (initial-mark)...
    ...)<timestamp> (initial-mark)...

(or "Full GC" instead of ")"). In the last two only the timestamp belongs to
the concurrent record; the rest of that record appears on the next line.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

LINES_MIXED_PATTERN: re.Pattern[str] = re.compile(
    r"(?P<prefix>.*\)|.*Full GC)"
    r"(?:(?P<record>[0-9.]+: \[.*)"
    r"|(?P<stamp_colon>[0-9.]+[: ]{2})(?P<rest_colon> ?[(,].*)"
    r"|(?P<stamp>[0-9.]+)(?P<rest> \(.*))"
)


@dataclass(frozen=True)
class LogicalLine:
    """Result of one reassembly cycle.

    ``embedded`` is True when ``text`` is a complete record cut out of the
    physical line; the rest of that line has been carried to the next cycle.
    """

    text: str
    embedded: bool = False


class LineReassembler:
    """Turns physical lines into logical lines, carrying fragments forward."""

    def __init__(self) -> None:
        self.carried: str | None = None

    def feed(self, line: str) -> LogicalLine:
        match = LINES_MIXED_PATTERN.fullmatch(line)
        if match is None:
            return LogicalLine(self.join(line))

        if self.carried is not None:
            logger.debug("Discarding carried fragment %r", self.carried)

        prefix = match.group("prefix")
        if match.group("record") is not None:
            self.carried = prefix
            return LogicalLine(match.group("record"), embedded=True)
        if match.group("stamp_colon") is not None:
            self.carried = match.group("stamp_colon")
            return LogicalLine(prefix + match.group("rest_colon"))
        self.carried = match.group("stamp")
        return LogicalLine(prefix + match.group("rest"))

    def join(self, line: str) -> str:
        """Prepend and clear the carried fragment, if any."""
        if self.carried is None:
            return line
        line = self.carried + line
        self.carried = None
        return line
