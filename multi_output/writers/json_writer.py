"""JSON lines output."""

from __future__ import annotations

import json
from pathlib import Path
from typing import IO, Any

from ..context import TaskContext
from .base import FileRecordWriter, FileWriterFactory, RecordWriter


class JsonLinesRecordWriter(FileRecordWriter):
    """One ``{"key": ..., "value": ...}`` object per line."""

    def _write_record(self, key: Any, value: Any) -> None:
        json.dump({"key": key, "value": value}, self._file, ensure_ascii=False, default=str)
        self._file.write("\n")


class JsonLinesWriterFactory(FileWriterFactory):
    extension = ".jsonl"

    def _build(self, context: TaskContext, path: Path, stream: IO[str]) -> RecordWriter:
        return JsonLinesRecordWriter(path, stream)


__all__ = ["JsonLinesRecordWriter", "JsonLinesWriterFactory"]
