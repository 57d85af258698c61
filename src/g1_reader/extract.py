"""Field extractors for single logical lines.

Every extractor reads ``line`` starting at ``pos.index``, advances the index
past what it consumed and raises ParseError when the expected field is missing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from g1_reader.errors import ParseError
from g1_reader.models import (
    Concurrency,
    ConcurrentEvent,
    GCEvent,
    GCType,
    GcShape,
    PauseEvent,
    lookup_type,
)


@dataclass
class ParsePosition:
    """Cursor used for diagnostics only."""

    line_number: int = 0
    index: int = 0


TIMESTAMP_PATTERN: re.Pattern[str] = re.compile(r"\s*(?P<value>\d+(?:\.\d+)?|\.\d+)")

# "[GC pause (young) (initial-mark), ..." -> "GC pause (young) (initial-mark)"
TYPE_PATTERN: re.Pattern[str] = re.compile(r"[:\s]*\[?\s*(?P<label>[A-Za-z][A-Za-z\- ()]*)")

PAUSE_PATTERN: re.Pattern[str] = re.compile(
    r"(?<![\d.])(?P<value>\d+(?:\.\d+)?(?:[eE][-+]?\d+)?)\s*secs?\b"
)

MEMORY_PATTERN: re.Pattern[str] = re.compile(
    r"(?P<before>\d+)(?P<before_unit>[BKMG])->"
    r"(?P<after>\d+)(?P<after_unit>[BKMG])"
    r"\((?P<total>\d+)(?P<total_unit>[BKMG])\)"
)

_UNIT_MULTIPLIERS: dict[str, int] = {
    "B": 1,
    "K": 1024,
    "M": 1024**2,
    "G": 1024**3,
}


def parse_size_to_bytes(value: str, unit: str) -> int:
    """Convert a JVM size such as ('4096', 'K') into bytes."""
    multiplier = _UNIT_MULTIPLIERS.get(unit.upper())
    if multiplier is None:
        raise ParseError(f"Unsupported size unit: {unit}")
    return int(value) * multiplier


def memory_from_match(match: re.Match[str]) -> tuple[int, int, int]:
    """Return (before, after, total) in bytes; total is the parenthesized capacity."""
    return (
        parse_size_to_bytes(match.group("before"), match.group("before_unit")),
        parse_size_to_bytes(match.group("after"), match.group("after_unit")),
        parse_size_to_bytes(match.group("total"), match.group("total_unit")),
    )


def parse_timestamp(line: str, pos: ParsePosition) -> float:
    match = TIMESTAMP_PATTERN.match(line, pos.index)
    if not match:
        raise ParseError("Expected timestamp", line, pos)
    pos.index = match.end()
    return float(match.group("value"))


def parse_type(line: str, pos: ParsePosition) -> GCType:
    match = TYPE_PATTERN.match(line, pos.index)
    if not match:
        raise ParseError("Expected gc type", line, pos)
    label = match.group("label").strip()
    gc_type = lookup_type(label)
    if gc_type is None:
        raise ParseError(f"Unknown gc type '{label}'", line, pos)
    pos.index = match.start("label") + len(label)
    return gc_type


def parse_pause(line: str, pos: ParsePosition) -> float:
    """Parse the duration in front of the next 'secs'/'sec' suffix."""
    match = PAUSE_PATTERN.search(line, pos.index)
    if not match:
        raise ParseError("Expected pause in secs", line, pos)
    pos.index = match.end()
    return float(match.group("value"))


def parse_memory(line: str, pos: ParsePosition) -> tuple[int, int, int]:
    """Parse the next 'before->after(total)' triple."""
    match = MEMORY_PATTERN.search(line, pos.index)
    if not match:
        raise ParseError("Expected memory information 'before->after(total)'", line, pos)
    pos.index = match.end()
    return memory_from_match(match)


def parse_line(line: str, pos: ParsePosition) -> GCEvent:
    """Best-effort parse of a complete one-line event."""
    timestamp = parse_timestamp(line, pos)
    gc_type = parse_type(line, pos)

    if gc_type.concurrency is Concurrency.CONCURRENT:
        if gc_type.shape is GcShape.SIMPLE:
            return ConcurrentEvent(timestamp=timestamp, type=gc_type)
        duration = parse_pause(line, pos)
        return ConcurrentEvent(timestamp=timestamp, type=gc_type, pause=duration, duration=duration)

    if gc_type.shape is GcShape.MEMORY_PAUSE:
        before, after, total = parse_memory(line, pos)
        return PauseEvent(
            timestamp=timestamp,
            type=gc_type,
            pause=parse_pause(line, pos),
            memory_before=before,
            memory_after=after,
            memory_total=total,
        )

    return PauseEvent(timestamp=timestamp, type=gc_type, pause=parse_pause(line, pos))
