"""Reader for Sun/Oracle JDK 1.6 G1 garbage-collection logs (-XX:+PrintGCDetails)."""

from g1_reader.config import ReaderConfig
from g1_reader.errors import LogReadError, ParseError
from g1_reader.models import (
    TYPE_CATALOG,
    Concurrency,
    ConcurrentEvent,
    DetailedPauseEvent,
    GCEvent,
    GCModel,
    GCType,
    GcShape,
    LogFormat,
    ParseDiagnostic,
    PauseEvent,
)
from g1_reader.reader import G1DataReader, read_gc_log

__version__ = "1.0.0"

__all__ = [
    "TYPE_CATALOG",
    "Concurrency",
    "ConcurrentEvent",
    "DetailedPauseEvent",
    "G1DataReader",
    "GCEvent",
    "GCModel",
    "GCType",
    "GcShape",
    "LogFormat",
    "LogReadError",
    "ParseDiagnostic",
    "ParseError",
    "PauseEvent",
    "ReaderConfig",
    "read_gc_log",
]
