"""Line oriented text output: ``key<separator>value`` per record."""

from __future__ import annotations

from pathlib import Path
from typing import IO, Any

from ..context import DEFAULT_SEPARATOR, SEPARATOR_KEY, TaskContext
from .base import FileRecordWriter, FileWriterFactory, RecordWriter


class TextRecordWriter(FileRecordWriter):
    """Write records as separator-joined lines.

    A ``None`` key or value is left out together with the separator; a record
    with neither produces no line at all.
    """

    def __init__(self, path: Path, stream: IO[str], separator: str = DEFAULT_SEPARATOR) -> None:
        super().__init__(path, stream)
        self.separator = separator

    def write(self, key: Any, value: Any) -> None:
        if key is None and value is None:
            return
        super().write(key, value)

    def _write_record(self, key: Any, value: Any) -> None:
        if key is None:
            line = str(value)
        elif value is None:
            line = str(key)
        else:
            line = f"{key}{self.separator}{value}"
        self._file.write(line)
        self._file.write("\n")


class TextWriterFactory(FileWriterFactory):
    newline = ""

    def __init__(self, extension: str = "", encoding: str = "utf-8") -> None:
        super().__init__(encoding=encoding)
        self.extension = extension

    def _build(self, context: TaskContext, path: Path, stream: IO[str]) -> RecordWriter:
        separator = context.configuration.get_str(SEPARATOR_KEY, DEFAULT_SEPARATOR)
        return TextRecordWriter(path, stream, separator=separator or DEFAULT_SEPARATOR)


__all__ = ["TextRecordWriter", "TextWriterFactory"]
