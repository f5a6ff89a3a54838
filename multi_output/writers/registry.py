"""Writer factory registry keyed by output format name."""

from __future__ import annotations

from typing import Callable, Dict

from .base import WriterFactory
from .csv_writer import CsvWriterFactory
from .json_writer import JsonLinesWriterFactory
from .text_writer import TextWriterFactory

FactoryBuilder = Callable[[], WriterFactory]

_FACTORIES: Dict[str, FactoryBuilder] = {
    "text": TextWriterFactory,
    "json": JsonLinesWriterFactory,
    "csv": CsvWriterFactory,
}


def register_writer_factory(fmt: str, builder: FactoryBuilder, replace: bool = False) -> None:
    """Make a new output format available to :func:`get_writer_factory`."""

    if fmt in _FACTORIES and not replace:
        raise ValueError(f"Writer factory '{fmt}' already registered")
    _FACTORIES[fmt] = builder


def list_writer_factories() -> list[str]:
    return sorted(_FACTORIES)


def get_writer_factory(fmt: str) -> WriterFactory:
    """Return a new factory instance for ``fmt``."""

    if fmt not in _FACTORIES:
        raise KeyError(
            f"Unknown output format: {fmt}. "
            f"Available: {list_writer_factories()}. "
            f"Register with register_writer_factory()"
        )
    return _FACTORIES[fmt]()


__all__ = ["get_writer_factory", "list_writer_factories", "register_writer_factory"]
