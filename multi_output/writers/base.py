"""Record writer and writer factory contracts."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO, Any

from ..context import TaskContext
from ..errors import CreationError


class RecordWriter(ABC):
    """Writes key/value records to one physical sink."""

    @abstractmethod
    def write(self, key: Any, value: Any) -> None:
        """Persist a single record."""

    @abstractmethod
    def flush(self) -> None:
        """Flush buffered data to the sink."""

    @abstractmethod
    def close(self) -> None:
        """Flush and release the sink; calling it again is a no-op."""


class WriterFactory(ABC):
    """Build a fresh writer for one destination; factories keep no cache."""

    extension: str = ""

    @abstractmethod
    def create_writer(self, context: TaskContext, destination: str) -> RecordWriter:
        """Open the sink named by ``destination`` or raise :class:`CreationError`."""


class FileRecordWriter(RecordWriter):
    """Shared plumbing for writers backed by a text file handle."""

    def __init__(self, path: Path, stream: IO[str]) -> None:
        self.path = path
        self._file = stream
        self.records = 0

    @property
    def closed(self) -> bool:
        return self._file.closed

    def write(self, key: Any, value: Any) -> None:
        self._write_record(key, value)
        self.records += 1

    @abstractmethod
    def _write_record(self, key: Any, value: Any) -> None:
        ...

    def flush(self) -> None:
        self._file.flush()

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()


class FileWriterFactory(WriterFactory):
    """Resolve destinations under the task's work path and open them exclusively."""

    newline: str | None = None

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def resolve_path(self, context: TaskContext, destination: str) -> Path:
        work_path = context.work_path.resolve()
        relative = destination.strip()
        if not relative or relative.startswith("/"):
            raise CreationError(destination, "destination must be a non-empty relative path")
        path = (work_path / f"{relative}{self.extension}").resolve()
        if work_path not in path.parents:
            raise CreationError(destination, f"destination escapes work path {work_path}")
        return path

    def create_writer(self, context: TaskContext, destination: str) -> RecordWriter:
        path = self.resolve_path(context, destination)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            stream = path.open("x", encoding=self.encoding, newline=self.newline)
        except FileExistsError as exc:
            raise CreationError(destination, f"output already exists: {path}") from exc
        except OSError as exc:
            raise CreationError(destination, f"cannot open {path}: {exc}") from exc
        try:
            return self._build(context, path, stream)
        except Exception as exc:
            stream.close()
            raise CreationError(destination, f"cannot initialise {path}: {exc}") from exc

    @abstractmethod
    def _build(self, context: TaskContext, path: Path, stream: IO[str]) -> RecordWriter:
        ...


__all__ = ["FileRecordWriter", "FileWriterFactory", "RecordWriter", "WriterFactory"]
