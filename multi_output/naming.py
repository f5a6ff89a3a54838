"""Destination naming: hooks mapping a record to its destination and payload.

A destination id is a relative POSIX path such as ``2024/05/part-m-00000``.
It is computed in two steps: the record hooks of :class:`DestinationNaming`
turn the task's base leaf name into a per-record leaf, then
:func:`input_aware_name` optionally prefixes it with trailing directories of
the input file the record came from.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import PurePosixPath
from typing import Any, Callable, Mapping
from urllib.parse import urlparse

from .context import (
    BASENAME_KEY,
    DEFAULT_BASENAME,
    INPUT_FILE_KEY,
    TRAILING_LEGS_KEY,
    JobConfiguration,
    TaskContext,
)

KeyHook = Callable[[Any, Any], Any]
LeafHook = Callable[[Any, Any, str], str]
BaseLeafHook = Callable[[str], str]


def identity_key(key: Any, value: Any) -> Any:
    return key


def identity_value(key: Any, value: Any) -> Any:
    return value


def identity_leaf(key: Any, value: Any, leaf: str) -> str:
    return leaf


def identity_base_leaf(leaf: str) -> str:
    return leaf


@dataclass(frozen=True, slots=True)
class DestinationNaming:
    """Pluggable naming strategy; every hook defaults to identity.

    Hooks must be pure: calling one twice with the same arguments has to give
    the same answer, otherwise records of one destination would be scattered
    over several writers.
    """

    key_hook: KeyHook = identity_key
    value_hook: KeyHook = identity_value
    leaf_hook: LeafHook = identity_leaf
    base_leaf_hook: BaseLeafHook = identity_base_leaf

    def actual_key(self, key: Any, value: Any) -> Any:
        return self.key_hook(key, value)

    def actual_value(self, key: Any, value: Any) -> Any:
        return self.value_hook(key, value)

    def leaf_for_record(self, key: Any, value: Any, leaf: str) -> str:
        return self.leaf_hook(key, value, leaf)

    def base_leaf(self, leaf: str) -> str:
        return self.base_leaf_hook(leaf)

    def with_overrides(self, **hooks: Callable[..., Any]) -> "DestinationNaming":
        return replace(self, **hooks)


def route_by_key(as_file_name: bool = False, keep_key: bool = True) -> DestinationNaming:
    """Send every record into a destination named after its key.

    By default the key becomes a directory holding the task's leaf file
    (``<key>/part-r-00000``); with ``as_file_name`` the key is the file name.
    Records sharing a key must be produced by the same task.
    """

    def _leaf(key: Any, value: Any, leaf: str) -> str:
        segment = "/".join(part for part in PurePosixPath(str(key)).parts if part not in ("/", "."))
        if not segment:
            return leaf
        if as_file_name:
            return segment
        return f"{segment}/{leaf}"

    naming = DestinationNaming(leaf_hook=_leaf)
    if not keep_key:
        naming = naming.with_overrides(key_hook=_drop)
    return naming


def drop_key() -> DestinationNaming:
    """Persist only the value of each record."""

    return DestinationNaming(key_hook=_drop)


def _drop(key: Any, value: Any) -> None:
    return None


def normalize_destination(destination: str) -> str:
    """Collapse repeated slashes, `.` segments and a trailing slash.

    Ids naming the same relative path compare equal afterwards. `..` is kept so
    the writer factory can still refuse destinations outside the work path.
    """

    if not destination:
        return destination
    return str(PurePosixPath(destination))


def _input_path(raw: str) -> PurePosixPath:
    if "://" in raw:
        return PurePosixPath(urlparse(raw).path)
    return PurePosixPath(raw)


def input_aware_name(configuration: Mapping[str, Any], name: str) -> str:
    """Prefix ``name`` with up to N trailing directories of the input file.

    N comes from ``TRAILING_LEGS_KEY``. Without an input file, or with N <= 0,
    ``name`` is returned unchanged. Collection stops quietly at the root, so
    asking for more directories than the path has is not an error.
    """

    if not isinstance(configuration, JobConfiguration):
        configuration = JobConfiguration(configuration)
    raw = configuration.get_str(INPUT_FILE_KEY)
    if not raw:
        return name
    legs = configuration.get_int(TRAILING_LEGS_KEY, 0)
    if legs <= 0:
        return name

    segments: list[str] = []
    parent = _input_path(raw).parent
    while len(segments) < legs:
        if not parent.name:
            break
        segments.append(parent.name)
        parent = parent.parent
    if not segments:
        return name
    segments.reverse()
    return str(PurePosixPath(*segments, name))


def output_name(context: TaskContext) -> str:
    return context.configuration.get_str(BASENAME_KEY, DEFAULT_BASENAME) or DEFAULT_BASENAME


def unique_file(context: TaskContext, name: str, extension: str = "") -> str:
    """Per-attempt leaf name, e.g. ``part-m-00003``."""

    attempt = context.attempt
    return f"{name}-{attempt.task_type}-{attempt.partition:05d}{extension}"


__all__ = [
    "DestinationNaming",
    "drop_key",
    "identity_base_leaf",
    "identity_key",
    "identity_leaf",
    "identity_value",
    "input_aware_name",
    "normalize_destination",
    "output_name",
    "route_by_key",
    "unique_file",
]
