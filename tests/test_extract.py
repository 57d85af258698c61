import pytest

from g1_reader.errors import ParseError
from g1_reader.extract import (
    ParsePosition,
    parse_line,
    parse_memory,
    parse_pause,
    parse_size_to_bytes,
    parse_timestamp,
    parse_type,
)
from g1_reader.models import Concurrency, ConcurrentEvent, GcShape, PauseEvent


def test_memory_normalization():
    """4096K->3936K(16M): the parenthesized value is the heap capacity."""
    before, after, total = parse_memory("   [ 4096K->3936K(16M)]", ParsePosition())

    assert before == 4096 * 1024
    assert after == 3936 * 1024
    assert total == 16 * 1024 * 1024


@pytest.mark.parametrize(
    "value, unit, expected",
    [
        ("0", "B", 0),
        ("512", "K", 512 * 1024),
        ("3", "M", 3 * 1024**2),
        ("2", "G", 2 * 1024**3),
    ],
)
def test_parse_size_to_bytes(value, unit, expected):
    assert parse_size_to_bytes(value, unit) == expected


def test_parse_size_rejects_unknown_unit():
    with pytest.raises(ParseError):
        parse_size_to_bytes("12", "T")


def test_extractors_advance_position():
    line = "0.404: [GC cleanup 5M->5M(16M), 0.0001840 secs]"
    pos = ParsePosition()

    assert parse_timestamp(line, pos) == 0.404
    assert pos.index == 5

    gc_type = parse_type(line, pos)
    assert gc_type.label == "GC cleanup"
    assert line[pos.index:].startswith(" 5M")

    parse_memory(line, pos)
    assert parse_pause(line, pos) == pytest.approx(0.000184)


def test_parse_timestamp_failure_reports_offset():
    pos = ParsePosition(line_number=7)
    with pytest.raises(ParseError) as excinfo:
        parse_timestamp("[GC concurrent-mark-start]", pos)

    assert excinfo.value.line_number == 7
    assert excinfo.value.index == 0
    assert "line 7" in str(excinfo.value)


def test_parse_type_unknown_label():
    with pytest.raises(ParseError, match="Unknown gc type 'GC frobnicate'"):
        parse_line("1.0: [GC frobnicate, 0.01 secs]", ParsePosition())


def test_parse_pause_accepts_sec_and_secs():
    assert parse_pause("[GC concurrent-mark-end, 0.0108260 sec]", ParsePosition()) == 0.010826
    assert parse_pause("[GC remark, 0.0011210 secs]", ParsePosition()) == 0.001121


def test_parse_pause_missing():
    with pytest.raises(ParseError, match="Expected pause"):
        parse_pause("[GC remark]", ParsePosition())


def test_parse_line_simple_concurrent_event():
    event = parse_line("0.358: [GC concurrent-mark-start]", ParsePosition())

    assert isinstance(event, ConcurrentEvent)
    assert event.timestamp == 0.358
    assert event.type.label == "GC concurrent-mark-start"
    assert event.concurrency is Concurrency.CONCURRENT
    assert event.shape is GcShape.SIMPLE
    assert event.pause is None
    assert event.duration is None


def test_parse_line_concurrent_event_with_duration():
    event = parse_line("0.402: [GC concurrent-mark-end, 0.0108260 sec]", ParsePosition())

    assert isinstance(event, ConcurrentEvent)
    assert event.duration == 0.010826
    assert event.pause == event.duration


def test_parse_line_pause_event():
    event = parse_line("0.403: [GC remark, 0.0011210 secs]", ParsePosition())

    assert isinstance(event, PauseEvent)
    assert event.concurrency is Concurrency.STOP_THE_WORLD
    assert event.pause == 0.001121
    assert event.memory_total is None


def test_parse_line_memory_pause_event():
    event = parse_line("1.250: [Full GC (System) 16M->8M(32M), 0.0310000 secs]", ParsePosition())

    assert isinstance(event, PauseEvent)
    assert event.type.label == "Full GC (System)"
    assert event.memory_before == 16 * 1024**2
    assert event.memory_after == 8 * 1024**2
    assert event.memory_total == 32 * 1024**2
    assert event.pause == 0.031


def test_parse_line_memory_pause_without_memory_fails():
    with pytest.raises(ParseError, match="Expected memory"):
        parse_line("0.402: [GC pause (young), 0.0021 secs]", ParsePosition())
