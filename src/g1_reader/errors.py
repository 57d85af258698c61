"""Exceptions raised while reading G1 logs."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from g1_reader.extract import ParsePosition
    from g1_reader.models import GCModel


class ParseError(ValueError):
    """A single logical line could not be parsed; the read loop skips it."""

    def __init__(self, message: str, line: str = "", position: ParsePosition | None = None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.line_number = position.line_number if position is not None else 0
        self.index = position.index if position is not None else 0

    def __str__(self) -> str:
        if not self.line:
            return self.message
        return f"{self.message} (line {self.line_number}, offset {self.index}): {self.line}"


class LogReadError(Exception):
    """The line source failed; ``model`` holds everything parsed before the failure."""

    def __init__(self, message: str, model: GCModel):
        super().__init__(message)
        self.model = model
