"""Route records to lazily opened per-destination writers."""

from __future__ import annotations

from enum import Enum
from typing import Any

import structlog

from .context import TaskContext
from .errors import CloseError, CloseErrors, CreationError, WriteError, WriterClosedError
from .logging_conf import task_logger
from .naming import DestinationNaming, input_aware_name, normalize_destination, output_name, unique_file
from .writers import RecordWriter, TextWriterFactory, WriterFactory


class WriterState(str, Enum):
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


class MultiplexingWriter:
    """Fan records out to one writer per destination id.

    Owned by a single task attempt: ``write`` is called sequentially by one
    caller, followed by one ``close``. The instance takes no locks, so sharing
    it between threads is not supported. Every writer it creates is owned by
    its cache until ``close`` drains it.
    """

    def __init__(
        self,
        context: TaskContext,
        factory: WriterFactory,
        base_leaf: str,
        naming: DestinationNaming | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.context = context
        self.factory = factory
        self.base_leaf = base_leaf
        self.naming = naming or DestinationNaming()
        self.logger = logger or task_logger(context.attempt)
        self._writers: dict[str, RecordWriter] = {}
        self._counts: dict[str, int] = {}
        self._state = WriterState.OPEN

    @property
    def state(self) -> WriterState:
        return self._state

    @property
    def destinations(self) -> list[str]:
        """Destination ids in the order their writers were opened."""

        return list(self._writers)

    @property
    def record_counts(self) -> dict[str, int]:
        return dict(self._counts)

    def destination_for(self, key: Any, value: Any) -> str:
        leaf = self.naming.leaf_for_record(key, value, self.base_leaf)
        return normalize_destination(input_aware_name(self.context.configuration, leaf))

    def write(self, key: Any, value: Any) -> None:
        if self._state is not WriterState.OPEN:
            raise WriterClosedError(f"cannot write once the writer is {self._state.value}")
        destination = self.destination_for(key, value)
        actual_key = self.naming.actual_key(key, value)
        actual_value = self.naming.actual_value(key, value)

        writer = self._writers.get(destination)
        if writer is None:
            writer = self._open(destination)
        try:
            writer.write(actual_key, actual_value)
        except Exception as exc:  # noqa: BLE001
            raise WriteError(destination, exc) from exc
        self._counts[destination] += 1

    def _open(self, destination: str) -> RecordWriter:
        try:
            writer = self.factory.create_writer(self.context, destination)
        except CreationError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise CreationError(destination, f"writer factory failed: {exc}") from exc
        self._writers[destination] = writer
        self._counts[destination] = 0
        self.logger.debug("destination_opened", destination=destination, open_writers=len(self._writers))
        return writer

    def close(self) -> None:
        """Close every cached writer, then report all failures at once."""

        if self._state is not WriterState.OPEN:
            return
        self._state = WriterState.CLOSING
        failures: list[CloseError] = []
        opened = len(self._writers)
        try:
            for destination, writer in self._writers.items():
                try:
                    writer.close()
                except Exception as exc:  # noqa: BLE001
                    self.logger.error("destination_close_failed", destination=destination, error=str(exc))
                    failures.append(CloseError(destination, exc))
        finally:
            self._writers.clear()
            self._state = WriterState.CLOSED
        self.logger.info(
            "writer_drained",
            destinations=opened,
            records=sum(self._counts.values()),
            failed=len(failures),
        )
        if failures:
            raise CloseErrors(failures)

    def __enter__(self) -> "MultiplexingWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc is None:
            self.close()
            return
        # The task's own exception wins; close failures are only logged.
        try:
            self.close()
        except CloseErrors as close_exc:
            self.logger.error(
                "close_failed_during_abort",
                destinations=close_exc.destinations,
                error=str(exc),
            )


class MultipleOutputFormat:
    """Entry point handing each task attempt its own :class:`MultiplexingWriter`."""

    def __init__(self, factory: WriterFactory, naming: DestinationNaming | None = None) -> None:
        self.factory = factory
        self.naming = naming or DestinationNaming()

    def base_leaf(self, context: TaskContext) -> str:
        name = unique_file(context, output_name(context))
        return self.naming.base_leaf(name)

    def get_writer(self, context: TaskContext) -> MultiplexingWriter:
        context.committer.setup_task()
        return MultiplexingWriter(context, self.factory, self.base_leaf(context), self.naming)


class MultipleTextOutputFormat(MultipleOutputFormat):
    """Text specialization: every destination is a ``key<TAB>value`` file."""

    def __init__(self, naming: DestinationNaming | None = None, extension: str = "") -> None:
        super().__init__(TextWriterFactory(extension=extension), naming)


__all__ = [
    "MultipleOutputFormat",
    "MultipleTextOutputFormat",
    "MultiplexingWriter",
    "WriterState",
]
