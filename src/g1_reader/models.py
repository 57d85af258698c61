"""Event model for Sun 1.6.x G1 logs: type catalog, event variants, GCModel."""

from __future__ import annotations

import bisect
from collections import Counter
from enum import Enum
from typing import Annotated, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

SecondsValue: TypeAlias = float
BytesValue: TypeAlias = int

# ============================================================
# TYPE CATALOG
# ============================================================


class Concurrency(str, Enum):
    """Whether a collector phase pauses the application."""

    STOP_THE_WORLD = "stop-the-world"
    CONCURRENT = "concurrent"


class GcShape(str, Enum):
    """Which fields a log record of a given type carries."""

    SIMPLE = "simple"  # timestamp and type only
    PAUSE = "pause"  # + duration
    MEMORY_PAUSE = "memory-pause"  # + before/after/total memory


class LogFormat(str, Enum):
    SUN_X_LOG_GC = "sun-x-log-gc"


class GCType(BaseModel):
    """A collector-phase label with its static properties."""

    model_config = ConfigDict(frozen=True)

    label: str
    concurrency: Concurrency
    shape: GcShape


def _stw(label: str, shape: GcShape) -> GCType:
    return GCType(label=label, concurrency=Concurrency.STOP_THE_WORLD, shape=shape)


def _concurrent(label: str, shape: GcShape) -> GCType:
    return GCType(label=label, concurrency=Concurrency.CONCURRENT, shape=shape)


TYPE_CATALOG: dict[str, GCType] = {
    gc_type.label: gc_type
    for gc_type in (
        _stw("GC pause (young)", GcShape.MEMORY_PAUSE),
        _stw("GC pause (partial)", GcShape.MEMORY_PAUSE),
        _stw("GC pause (mixed)", GcShape.MEMORY_PAUSE),
        _stw("GC pause (young) (initial-mark)", GcShape.MEMORY_PAUSE),
        _stw("GC pause (partial) (initial-mark)", GcShape.MEMORY_PAUSE),
        _stw("GC pause (mixed) (initial-mark)", GcShape.MEMORY_PAUSE),
        _stw("GC pause (young) (to-space overflow)", GcShape.MEMORY_PAUSE),
        _stw("GC pause (partial) (to-space overflow)", GcShape.MEMORY_PAUSE),
        _stw("GC pause (mixed) (to-space overflow)", GcShape.MEMORY_PAUSE),
        _stw("Full GC", GcShape.MEMORY_PAUSE),
        _stw("Full GC (System)", GcShape.MEMORY_PAUSE),
        _stw("GC cleanup", GcShape.MEMORY_PAUSE),
        _stw("GC remark", GcShape.PAUSE),
        _concurrent("GC concurrent-root-region-scan-start", GcShape.SIMPLE),
        _concurrent("GC concurrent-root-region-scan-end", GcShape.PAUSE),
        _concurrent("GC concurrent-mark-start", GcShape.SIMPLE),
        _concurrent("GC concurrent-mark-end", GcShape.PAUSE),
        _concurrent("GC concurrent-mark-abort", GcShape.SIMPLE),
        _concurrent("GC concurrent-mark-reset-for-overflow", GcShape.SIMPLE),
        _concurrent("GC concurrent-count-start", GcShape.SIMPLE),
        _concurrent("GC concurrent-count-end", GcShape.PAUSE),
        _concurrent("GC concurrent-cleanup-start", GcShape.SIMPLE),
        _concurrent("GC concurrent-cleanup-end", GcShape.PAUSE),
    )
}


def lookup_type(label: str) -> GCType | None:
    """Resolve a free-text label against the catalog (surrounding blanks ignored)."""
    return TYPE_CATALOG.get(label.strip())


# ============================================================
# EVENTS
# ============================================================


class GCEvent(BaseModel):
    """Fields shared by every sealed event."""

    model_config = ConfigDict(frozen=True)

    timestamp: SecondsValue = Field(ge=0.0)
    type: GCType
    pause: SecondsValue | None = Field(default=None, ge=0.0)

    @property
    def concurrency(self) -> Concurrency:
        return self.type.concurrency

    @property
    def shape(self) -> GcShape:
        return self.type.shape


class ConcurrentEvent(GCEvent):
    """A phase running alongside the application threads."""

    kind: Literal["concurrent"] = "concurrent"
    duration: SecondsValue | None = Field(default=None, ge=0.0)


class PauseEvent(GCEvent):
    """Stop-the-world event sealed from a single logical line."""

    kind: Literal["pause"] = "pause"
    memory_before: BytesValue | None = None
    memory_after: BytesValue | None = None
    memory_total: BytesValue | None = None


class DetailedPauseEvent(GCEvent):
    """Memory pause accumulated over the lines of a -XX:+PrintGCDetails block.

    Memory fields stay None when the block carried no memory-region line.
    """

    kind: Literal["detailed-pause"] = "detailed-pause"
    memory_before: BytesValue | None = None
    memory_after: BytesValue | None = None
    memory_total: BytesValue | None = None


Event: TypeAlias = Annotated[
    ConcurrentEvent | PauseEvent | DetailedPauseEvent, Field(discriminator="kind")
]


# ============================================================
# MODEL
# ============================================================


class ParseDiagnostic(BaseModel):
    """A line that was dropped because it could not be parsed."""

    model_config = ConfigDict(frozen=True)

    line_number: int
    index: int = 0
    text: str
    message: str


class GCModel(BaseModel):
    """Sealed events of one log, ordered by timestamp."""

    format: LogFormat = LogFormat.SUN_X_LOG_GC
    events: list[Event] = Field(default_factory=list)
    diagnostics: list[ParseDiagnostic] = Field(default_factory=list)

    def add(self, event: GCEvent) -> None:
        # insort_right keeps arrival order among equal timestamps
        bisect.insort(self.events, event, key=lambda e: e.timestamp)

    def add_diagnostic(self, diagnostic: ParseDiagnostic) -> None:
        self.diagnostics.append(diagnostic)

    def __len__(self) -> int:
        return len(self.events)

    @property
    def pause_events(self) -> list[GCEvent]:
        return [e for e in self.events if e.concurrency is Concurrency.STOP_THE_WORLD]

    @property
    def concurrent_events(self) -> list[GCEvent]:
        return [e for e in self.events if e.concurrency is Concurrency.CONCURRENT]

    def count_by_type(self) -> dict[str, int]:
        return dict(Counter(e.type.label for e in self.events))
