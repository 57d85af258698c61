"""Reader for G1 logs written by Sun/Oracle JDK 1.6 with -XX:+PrintGCDetails.

Detailed output looks like::

    0.356: [GC pause (young), 0.00219944 secs]
       [Parallel Time:   2.1 ms]
       ...
       [ 4096K->3936K(16M)]
     [Times: user=0.01 sys=0.00, real=0.00 secs]
    0.402: [GC concurrent-mark-start]
    0.413: [GC concurrent-mark-end, 0.0108 sec]

A pause header opens a detailed event, memory-region lines fill it in and the
"[Times" trailer seals it. Concurrent records are single lines, but the JVM
may interleave them with the line of another record (see reassembly).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Any, TextIO

from g1_reader.config import ReaderConfig
from g1_reader.errors import LogReadError, ParseError
from g1_reader.extract import MEMORY_PATTERN, ParsePosition, memory_from_match, parse_line
from g1_reader.models import (
    DetailedPauseEvent,
    GCModel,
    GCType,
    GcShape,
    ParseDiagnostic,
    lookup_type,
)
from g1_reader.reassembly import LineReassembler

logger = logging.getLogger(__name__)

TIMES = "[Times"
HEAP_SIZING_START = "Heap"
HEAP_SUMMARY_END_MARKERS: tuple[str, ...] = (
    "garbage-first heap",
    "region size",
    "compacting perm gen",
    "the space",
    "No shared spaces configured.",
    "}",
)

# "0.295: [GC pause (young), 0.00594747 secs]"
GC_PAUSE_PATTERN: re.Pattern[str] = re.compile(
    r"^(?P<timestamp>[0-9.]+)[: \[]{3}(?P<label>[A-Za-z\- ()]+)[, ]+(?P<pause>[0-9.]+)[ sec\]]+$"
)
# "   [ 4096K->3936K(16M)]"
MEMORY_LINE_PATTERN: re.Pattern[str] = re.compile(r"^[ \[]{5}[0-9]+[BKMG].*")


# ============================================================
# CLASSIFIER
# ============================================================


class LineKind(Enum):
    PAUSE = auto()
    DETAILED_HEADER = auto()
    HEAP_SUMMARY = auto()
    TRAILER = auto()
    OTHER = auto()


@dataclass(frozen=True)
class Classification:
    kind: LineKind
    gc_type: GCType | None = None
    match: re.Match[str] | None = None


def classify_line(line: str, pos: ParsePosition) -> Classification:
    """Decide what a complete logical line represents.

    Raises ParseError when the line has the shape of a pause record but its
    label is not a known type.
    """
    match = GC_PAUSE_PATTERN.match(line)
    if match:
        gc_type = lookup_type(match.group("label"))
        if gc_type is None:
            pos.index = match.start("label")
            raise ParseError(f"Unknown gc type '{match.group('label').strip()}'", line, pos)
        if gc_type.shape is GcShape.MEMORY_PAUSE:
            # with -XX:+PrintGCDetails memory pauses are always followed by detail lines
            return Classification(LineKind.DETAILED_HEADER, gc_type, match)
        return Classification(LineKind.PAUSE, gc_type, match)

    if HEAP_SIZING_START in line:
        return Classification(LineKind.HEAP_SUMMARY)
    if TIMES in line:
        return Classification(LineKind.TRAILER)
    return Classification(LineKind.OTHER)


# ============================================================
# DETAILED EVENTS
# ============================================================


class DetailedEventAccumulator:
    """Collects a multi-line memory pause until its trailer line."""

    def __init__(self) -> None:
        self._pending: dict[str, Any] | None = None

    @property
    def in_progress(self) -> bool:
        return self._pending is not None

    def start(self, classification: Classification, line: str, pos: ParsePosition) -> None:
        match = classification.match
        if match is None:
            raise ParseError("Not a pause header", line, pos)
        try:
            timestamp = float(match.group("timestamp"))
            pause = float(match.group("pause"))
        except ValueError as exc:
            raise ParseError(f"Malformed pause header: {exc}", line, pos) from exc
        self._pending = {"timestamp": timestamp, "type": classification.gc_type, "pause": pause}

    def feed(self, line: str, pos: ParsePosition) -> None:
        """Take memory information from a detail line; other lines are ignored."""
        if self._pending is None or not MEMORY_LINE_PATTERN.match(line):
            return
        matches = list(MEMORY_PATTERN.finditer(line))
        if not matches:
            pos.index = len(line)
            raise ParseError("Expected memory information 'before->after(total)'", line, pos)
        # young gen may precede whole-heap totals on the same line
        last = matches[-1]
        pos.index = last.end()
        before, after, total = memory_from_match(last)
        self._pending.update(memory_before=before, memory_after=after, memory_total=total)

    def seal(self) -> DetailedPauseEvent | None:
        pending, self._pending = self._pending, None
        if pending is None:
            return None
        return DetailedPauseEvent(**pending)

    def discard(self) -> None:
        self._pending = None


# ============================================================
# LINE SOURCE / HEAP SUMMARY
# ============================================================


class LineSource:
    """Physical lines with newline stripped, numbered from 1, with one-line pushback."""

    def __init__(self, lines: Iterable[str]):
        self._lines: Iterator[str] = iter(lines)
        self._pushed_back: str | None = None
        self.line_number = 0

    def readline(self) -> str | None:
        if self._pushed_back is not None:
            line, self._pushed_back = self._pushed_back, None
        else:
            raw = next(self._lines, None)
            if raw is None:
                return None
            line = raw.rstrip("\r\n")
        self.line_number += 1
        return line

    def push_back(self, line: str) -> None:
        self._pushed_back = line
        self.line_number -= 1


def skip_heap_summary(source: LineSource) -> int:
    """Discard a heap configuration dump; return the number of lines skipped.

    Lines are dropped up to the first one carrying an end marker, together
    with any marker lines directly after it. The first line without a marker
    goes back to the source.
    """
    skipped = 0
    seen_marker = False
    while (line := source.readline()) is not None:
        has_marker = any(marker in line for marker in HEAP_SUMMARY_END_MARKERS)
        if seen_marker and not has_marker:
            source.push_back(line)
            break
        seen_marker = seen_marker or has_marker
        skipped += 1
    return skipped


# ============================================================
# DRIVER
# ============================================================


@dataclass
class ReaderSession:
    """Mutable state of one read."""

    source: LineSource
    model: GCModel = field(default_factory=GCModel)
    position: ParsePosition = field(default_factory=ParsePosition)
    reassembler: LineReassembler = field(default_factory=LineReassembler)
    accumulator: DetailedEventAccumulator = field(default_factory=DetailedEventAccumulator)


class G1DataReader:
    """Reads a Sun 1.6.x G1 log into a GCModel.

    The stream is closed when reading ends, whatever the outcome.
    """

    format_name: str = "Sun 1.6.x G1"

    def __init__(self, stream: TextIO, config: ReaderConfig | None = None):
        self._stream = stream
        self._config = config or ReaderConfig()

    def read(self) -> GCModel:
        logger.info("Reading %s format...", self.format_name)
        session = ReaderSession(source=LineSource(self._stream))
        try:
            with self._stream:
                self._read_lines(session)
        except (OSError, UnicodeDecodeError) as exc:
            raise LogReadError(
                f"Failed reading line {session.source.line_number + 1}: {exc}", session.model
            ) from exc
        finally:
            logger.info("Done reading.")
        return session.model

    def _read_lines(self, session: ReaderSession) -> None:
        while (line := session.source.readline()) is not None:
            if not line:
                continue
            session.position.line_number = session.source.line_number
            session.position.index = 0
            try:
                self._process_line(line, session)
            except UnicodeDecodeError:
                # raised by lines read while skipping a heap summary
                raise
            except ValueError as exc:
                self._report(exc, line, session)

        if session.accumulator.in_progress:
            logger.debug("Dropping unterminated detailed event at end of log")
            session.accumulator.discard()

    def _process_line(self, line: str, session: ReaderSession) -> None:
        accumulator = session.accumulator
        reassembler = session.reassembler

        if not accumulator.in_progress:
            logical = reassembler.feed(line)
            if logical.embedded:
                # the rest of the physical line was carried to the next one
                self._dispatch(logical.text, session)
                return
            line = logical.text
            if self._dispatch(line, session) is LineKind.HEAP_SUMMARY:
                return
        elif reassembler.carried is not None:
            # concurrent record split around the header of a detailed event
            line = reassembler.join(line)
            session.model.add(parse_line(line, session.position))
        else:
            accumulator.feed(line, session.position)

        if TIMES in line:
            event = accumulator.seal()
            if event is not None:
                session.model.add(event)

    def _dispatch(self, line: str, session: ReaderSession) -> LineKind:
        classification = classify_line(line, session.position)
        kind = classification.kind
        if kind is LineKind.DETAILED_HEADER:
            session.accumulator.start(classification, line, session.position)
        elif kind is LineKind.PAUSE or kind is LineKind.OTHER:
            session.model.add(parse_line(line, session.position))
        elif kind is LineKind.HEAP_SUMMARY:
            skipped = skip_heap_summary(session.source)
            logger.debug(
                "Skipped heap summary at line %d (%d lines)",
                session.position.line_number,
                skipped,
            )
        return kind

    def _report(self, exc: ValueError, line: str, session: ReaderSession) -> None:
        position = session.position
        if isinstance(exc, ParseError):
            message, text, index = exc.message, exc.line or line, exc.index
        else:
            message, text, index = str(exc), line, position.index

        logger.warning("Skipping line %d: %s", position.line_number, message)
        logger.debug("Failed to parse line %d: %r", position.line_number, text, exc_info=exc)

        config = self._config
        if not config.record_diagnostics:
            return
        if config.max_diagnostics is not None and len(session.model.diagnostics) >= config.max_diagnostics:
            return
        session.model.add_diagnostic(
            ParseDiagnostic(
                line_number=position.line_number, index=index, text=text, message=message
            )
        )


def read_gc_log(path: str | Path, config: ReaderConfig | None = None) -> GCModel:
    """Open and read a Sun 1.6.x G1 log file."""
    config = config or ReaderConfig()
    log_path = Path(path)
    try:
        stream = log_path.open(encoding=config.encoding, errors=config.errors)
    except OSError as exc:
        raise LogReadError(f"Cannot open {log_path}: {exc}", GCModel()) from exc
    return G1DataReader(stream, config).read()
