"""Task-side collaborators: job configuration, attempt identity and output location."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, Mapping, MutableMapping

from .errors import ConfigurationError

INPUT_FILE_KEY = "map.input.file"
TRAILING_LEGS_KEY = "mapred.outputformat.numOfTrailingLegs"
BASENAME_KEY = "mapreduce.output.basename"
SEPARATOR_KEY = "mapreduce.output.textoutputformat.separator"

DEFAULT_BASENAME = "part"
DEFAULT_SEPARATOR = "\t"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class JobConfiguration(Mapping[str, Any]):
    """String-keyed configuration with typed accessors."""

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: MutableMapping[str, Any] = dict(values or {})

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"JobConfiguration({self._values!r})"

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def unset(self, key: str) -> None:
        self._values.pop(key, None)

    def get_str(self, key: str, default: str | None = None) -> str | None:
        value = self._values.get(key)
        if value is None:
            return default
        return str(value)

    def get_int(self, key: str, default: int = 0) -> int:
        value = self._values.get(key)
        if value is None or value == "":
            return default
        if isinstance(value, bool):
            raise ConfigurationError(f"{key} expects an integer, got {value!r}")
        try:
            return int(str(value).strip())
        except ValueError as exc:
            raise ConfigurationError(f"{key} expects an integer, got {value!r}") from exc

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self._values.get(key)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        raise ConfigurationError(f"{key} expects a boolean, got {value!r}")

    def copy(self) -> "JobConfiguration":
        return JobConfiguration(self._values)


@dataclass(frozen=True, slots=True)
class TaskAttemptId:
    """Identity of one execution attempt of a task."""

    job_id: str = "local"
    task_type: str = "m"
    partition: int = 0
    attempt: int = 0

    def __post_init__(self) -> None:
        if self.task_type not in ("m", "r"):
            raise ValueError("task_type must be 'm' (map) or 'r' (reduce)")
        if self.partition < 0:
            raise ValueError("partition must be >= 0")
        if self.attempt < 0:
            raise ValueError("attempt must be >= 0")

    def __str__(self) -> str:
        return f"attempt_{self.job_id}_{self.task_type}_{self.partition:06d}_{self.attempt}"


@dataclass(slots=True)
class OutputCommitter:
    """Supply the working directory into which a task attempt writes.

    With ``scope_by_attempt`` every attempt gets its own
    ``_temporary/<attempt>`` directory, so two attempts producing the same
    destination id never touch the same file. Promoting those files into the
    final output directory belongs to the surrounding job.
    """

    output_dir: Path
    attempt: TaskAttemptId = field(default_factory=TaskAttemptId)
    scope_by_attempt: bool = False

    def __post_init__(self) -> None:
        self.output_dir = Path(self.output_dir)

    @property
    def work_path(self) -> Path:
        if self.scope_by_attempt:
            return self.output_dir / "_temporary" / str(self.attempt)
        return self.output_dir

    def setup_task(self) -> Path:
        path = self.work_path
        path.mkdir(parents=True, exist_ok=True)
        return path


@dataclass(slots=True)
class TaskContext:
    """Everything one task attempt exposes to the output layer."""

    configuration: JobConfiguration
    committer: OutputCommitter
    attempt: TaskAttemptId = field(default_factory=TaskAttemptId)

    @classmethod
    def create(
        cls,
        output_dir: Path,
        configuration: Mapping[str, Any] | None = None,
        attempt: TaskAttemptId | None = None,
        scope_by_attempt: bool = False,
    ) -> "TaskContext":
        attempt = attempt or TaskAttemptId()
        if isinstance(configuration, JobConfiguration):
            job_conf = configuration
        else:
            job_conf = JobConfiguration(configuration)
        committer = OutputCommitter(Path(output_dir), attempt, scope_by_attempt)
        return cls(configuration=job_conf, committer=committer, attempt=attempt)

    @property
    def work_path(self) -> Path:
        return self.committer.work_path

    @property
    def input_path(self) -> str | None:
        return self.configuration.get_str(INPUT_FILE_KEY)

    def set_input_path(self, path: str | Path | None) -> None:
        """Record the input the following records originate from."""

        if path is None:
            self.configuration.unset(INPUT_FILE_KEY)
        else:
            self.configuration.set(INPUT_FILE_KEY, str(path))


__all__ = [
    "BASENAME_KEY",
    "DEFAULT_BASENAME",
    "DEFAULT_SEPARATOR",
    "INPUT_FILE_KEY",
    "JobConfiguration",
    "OutputCommitter",
    "SEPARATOR_KEY",
    "TRAILING_LEGS_KEY",
    "TaskAttemptId",
    "TaskContext",
]
