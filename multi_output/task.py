"""Run one local map-only task attempt through the multiplexing writer."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator

import structlog

from .config import OutputConfig
from .context import TaskAttemptId, TaskContext
from .errors import InputError
from .logging_conf import task_logger
from .multiplex import MultipleOutputFormat
from .naming import DestinationNaming, route_by_key
from .writers import get_writer_factory


@dataclass(slots=True)
class TaskSummary:
    """Outcome of a finished task attempt."""

    attempt: TaskAttemptId
    work_path: Path
    record_counts: dict[str, int] = field(default_factory=dict)
    inputs: int = 0

    @property
    def records(self) -> int:
        return sum(self.record_counts.values())


def split_line(line: str, separator: str) -> tuple[str, str]:
    """Split at the first separator; a line without one is all key."""

    key, found, value = line.partition(separator)
    if not found:
        return line, ""
    return key, value


def read_records(path: Path, separator: str) -> Iterator[tuple[str, str]]:
    with path.open("rb") as stream:
        for number, raw in enumerate(stream, start=1):
            try:
                line = raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise InputError(f"{path}: line {number} is not valid UTF-8: {exc.reason}") from exc
            yield split_line(line.rstrip("\r\n"), separator)


def build_output_format(config: OutputConfig) -> MultipleOutputFormat:
    naming = route_by_key() if config.route_by_key else DestinationNaming()
    return MultipleOutputFormat(get_writer_factory(config.output_format.value), naming)


def run_local_task(
    config: OutputConfig,
    inputs: Iterable[Path],
    partition: int = 0,
    logger: structlog.BoundLogger | None = None,
) -> TaskSummary:
    attempt = TaskAttemptId(job_id=config.job_id, task_type="m", partition=partition)
    context = TaskContext.create(
        config.output_dir,
        configuration=config.to_job_configuration(),
        attempt=attempt,
        scope_by_attempt=config.scope_by_attempt,
    )
    log = logger or task_logger(attempt, component="task")
    summary = TaskSummary(attempt=attempt, work_path=context.work_path)
    output_format = build_output_format(config)

    with output_format.get_writer(context) as writer:
        for path in inputs:
            context.set_input_path(path.resolve())
            log.info("input_started", input=str(path))
            for key, value in read_records(path, config.separator):
                writer.write(key, value)
            summary.inputs += 1
        summary.record_counts = writer.record_counts
    log.info(
        "task_finished",
        inputs=summary.inputs,
        destinations=len(summary.record_counts),
        records=summary.records,
    )
    return summary


__all__ = ["TaskSummary", "build_output_format", "read_records", "run_local_task", "split_line"]
