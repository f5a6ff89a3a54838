"""Writer SPI and the built-in file formats."""

from .base import FileRecordWriter, FileWriterFactory, RecordWriter, WriterFactory
from .csv_writer import CsvRecordWriter, CsvWriterFactory
from .json_writer import JsonLinesRecordWriter, JsonLinesWriterFactory
from .registry import get_writer_factory, list_writer_factories, register_writer_factory
from .text_writer import TextRecordWriter, TextWriterFactory

__all__ = [
    "CsvRecordWriter",
    "CsvWriterFactory",
    "FileRecordWriter",
    "FileWriterFactory",
    "JsonLinesRecordWriter",
    "JsonLinesWriterFactory",
    "RecordWriter",
    "TextRecordWriter",
    "TextWriterFactory",
    "WriterFactory",
    "get_writer_factory",
    "list_writer_factories",
    "register_writer_factory",
]
