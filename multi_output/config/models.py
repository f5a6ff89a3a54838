"""Pydantic models describing a multi-output task run."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from ..context import (
    BASENAME_KEY,
    DEFAULT_BASENAME,
    DEFAULT_SEPARATOR,
    SEPARATOR_KEY,
    TRAILING_LEGS_KEY,
    JobConfiguration,
)


class OutputFormat(str, Enum):
    """Built-in destination file formats."""

    TEXT = "text"
    JSON = "json"
    CSV = "csv"


class OutputConfig(BaseModel):
    """Settings for one task writing through the multiplexer."""

    output_dir: Path = Field(default=Path("output"))
    output_format: OutputFormat = OutputFormat.TEXT
    base_name: str = DEFAULT_BASENAME
    trailing_legs: int = Field(
        default=0,
        ge=0,
        description="Trailing input directories mirrored into destination names; 0 disables.",
    )
    separator: str = DEFAULT_SEPARATOR
    route_by_key: bool = False
    scope_by_attempt: bool = False
    job_id: str = "local"
    extra: dict[str, Any] = Field(
        default_factory=dict,
        description="Raw job configuration entries passed through untouched.",
    )

    @field_validator("output_dir", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path:
        return Path(value)

    @field_validator("base_name")
    @classmethod
    def _validate_base_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("base_name cannot be empty")
        if "/" in value:
            raise ValueError("base_name must not contain '/'")
        return value

    @field_validator("separator")
    @classmethod
    def _validate_separator(cls, value: str) -> str:
        if value == "":
            raise ValueError("separator cannot be empty")
        if "\n" in value:
            raise ValueError("separator must not contain a newline")
        return value

    def to_job_configuration(self) -> JobConfiguration:
        configuration = JobConfiguration(self.extra)
        configuration.set(TRAILING_LEGS_KEY, self.trailing_legs)
        configuration.set(BASENAME_KEY, self.base_name)
        configuration.set(SEPARATOR_KEY, self.separator)
        return configuration


__all__ = ["OutputConfig", "OutputFormat"]
