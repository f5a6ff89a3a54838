"""Exception hierarchy shared by the multiplexing layer."""

from __future__ import annotations

from typing import Sequence


class MultiOutputError(Exception):
    """Base class for every error raised by multi-output."""


class ConfigurationError(MultiOutputError):
    """Raised when a configuration value or file cannot be interpreted."""


class DestinationError(MultiOutputError):
    """Error attached to a single destination."""

    def __init__(self, destination: str, message: str) -> None:
        super().__init__(f"{destination}: {message}")
        self.destination = destination


class CreationError(DestinationError):
    """The writer for a destination could not be opened."""


class WriteError(DestinationError):
    """A delegated write to an open destination failed."""

    def __init__(self, destination: str, cause: BaseException) -> None:
        super().__init__(destination, f"write failed: {cause}")
        self.cause = cause


class CloseError(DestinationError):
    """A destination's writer failed to flush or close."""

    def __init__(self, destination: str, cause: BaseException) -> None:
        super().__init__(destination, f"close failed: {cause}")
        self.cause = cause


class CloseErrors(MultiOutputError):
    """Every close failure collected while draining a writer cache."""

    def __init__(self, errors: Sequence[CloseError]) -> None:
        self.errors = list(errors)
        names = ", ".join(error.destination for error in self.errors)
        super().__init__(f"{len(self.errors)} destination(s) failed to close: {names}")

    @property
    def destinations(self) -> list[str]:
        return [error.destination for error in self.errors]


class WriterClosedError(MultiOutputError):
    """Raised when a record is written after closing has started."""


class InputError(MultiOutputError):
    """An input file could not be read as records."""


__all__ = [
    "CloseError",
    "CloseErrors",
    "ConfigurationError",
    "CreationError",
    "DestinationError",
    "InputError",
    "MultiOutputError",
    "WriteError",
    "WriterClosedError",
]
