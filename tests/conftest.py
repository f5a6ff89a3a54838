"""Shared fixtures: task contexts and an in-memory writer factory."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest

from multi_output.context import TaskAttemptId, TaskContext
from multi_output.writers import RecordWriter, WriterFactory


class RecordingWriter(RecordWriter):
    """In-memory writer remembering every call it receives."""

    def __init__(self, destination: str, fail_on_close: bool = False, fail_on_write: bool = False) -> None:
        self.destination = destination
        self.fail_on_close = fail_on_close
        self.fail_on_write = fail_on_write
        self.records: list[tuple[Any, Any]] = []
        self.close_calls = 0
        self.flush_calls = 0

    def write(self, key: Any, value: Any) -> None:
        if self.fail_on_write:
            raise OSError("disk full")
        self.records.append((key, value))

    def flush(self) -> None:
        self.flush_calls += 1

    def close(self) -> None:
        self.close_calls += 1
        if self.fail_on_close:
            raise OSError(f"cannot close {self.destination}")


class RecordingFactory(WriterFactory):
    """Factory handing out :class:`RecordingWriter` instances."""

    def __init__(
        self,
        fail_close: set[str] | None = None,
        fail_write: set[str] | None = None,
        fail_create: set[str] | None = None,
    ) -> None:
        self.fail_close = fail_close or set()
        self.fail_write = fail_write or set()
        self.fail_create = fail_create or set()
        self.created: list[str] = []
        self.writers: dict[str, RecordingWriter] = {}

    def create_writer(self, context: TaskContext, destination: str) -> RecordingWriter:
        if destination in self.fail_create:
            raise PermissionError(f"permission denied: {destination}")
        self.created.append(destination)
        writer = RecordingWriter(
            destination,
            fail_on_close=destination in self.fail_close,
            fail_on_write=destination in self.fail_write,
        )
        self.writers[destination] = writer
        return writer


@pytest.fixture
def make_context(tmp_path: Path) -> Callable[..., TaskContext]:
    def _builder(
        configuration: dict[str, Any] | None = None,
        partition: int = 0,
        task_type: str = "m",
        scope_by_attempt: bool = False,
    ) -> TaskContext:
        attempt = TaskAttemptId(job_id="test", task_type=task_type, partition=partition)
        return TaskContext.create(
            tmp_path / "out",
            configuration=configuration,
            attempt=attempt,
            scope_by_attempt=scope_by_attempt,
        )

    return _builder


@pytest.fixture
def task_context(make_context: Callable[..., TaskContext]) -> TaskContext:
    return make_context()


@pytest.fixture
def recording_factory() -> RecordingFactory:
    return RecordingFactory()


@pytest.fixture
def make_factory() -> Callable[..., RecordingFactory]:
    return RecordingFactory
