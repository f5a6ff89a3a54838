"""CSV output with a ``key,value`` row per record."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import IO, Any, Sequence

from ..context import TaskContext
from .base import FileRecordWriter, FileWriterFactory, RecordWriter


class CsvRecordWriter(FileRecordWriter):
    def __init__(self, path: Path, stream: IO[str], header: Sequence[str] | None = None) -> None:
        super().__init__(path, stream)
        self._csv_writer = csv.writer(self._file)
        if header:
            self._csv_writer.writerow(header)

    def _write_record(self, key: Any, value: Any) -> None:
        self._csv_writer.writerow(["" if key is None else key, "" if value is None else value])


class CsvWriterFactory(FileWriterFactory):
    extension = ".csv"
    newline = ""

    def __init__(self, header: Sequence[str] | None = ("key", "value"), encoding: str = "utf-8") -> None:
        super().__init__(encoding=encoding)
        self.header = tuple(header) if header else None

    def _build(self, context: TaskContext, path: Path, stream: IO[str]) -> RecordWriter:
        return CsvRecordWriter(path, stream, header=self.header)


__all__ = ["CsvRecordWriter", "CsvWriterFactory"]
