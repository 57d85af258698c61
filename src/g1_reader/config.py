"""Reader settings."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ReaderConfig(BaseModel):
    """Configurable behaviour of G1DataReader."""

    model_config = ConfigDict(frozen=True)

    encoding: str = "utf-8"
    errors: str = "replace"  # decoding error policy passed to open()

    record_diagnostics: bool = True
    max_diagnostics: int | None = Field(default=None, ge=0)  # None = unbounded
