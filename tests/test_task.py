from __future__ import annotations

import json
from pathlib import Path

import pytest

from multi_output.config import OutputConfig, OutputFormat
from multi_output.errors import InputError
from multi_output.multiplex import MultipleOutputFormat
from multi_output.task import build_output_format, read_records, run_local_task, split_line
from multi_output.writers import JsonLinesWriterFactory


def _write(path: Path, lines: list[str]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_split_line() -> None:
    assert split_line("k\tv\tw", "\t") == ("k", "v\tw")
    assert split_line("lonely", "\t") == ("lonely", "")
    assert split_line("a::b", "::") == ("a", "b")


def test_read_records_strips_line_endings(tmp_path: Path) -> None:
    path = tmp_path / "in.txt"
    path.write_bytes(b"a\t1\r\nb\t2\n")
    assert list(read_records(path, "\t")) == [("a", "1"), ("b", "2")]


def test_read_records_rejects_invalid_utf8(tmp_path: Path) -> None:
    path = tmp_path / "in.txt"
    path.write_bytes(b"ok\t1\nk\t\xff\xfe\n")
    records = read_records(path, "\t")
    assert next(records) == ("ok", "1")
    with pytest.raises(InputError, match="line 2"):
        next(records)


def test_build_output_format_uses_registry() -> None:
    output_format = build_output_format(OutputConfig(output_format=OutputFormat.JSON))
    assert isinstance(output_format, MultipleOutputFormat)
    assert isinstance(output_format.factory, JsonLinesWriterFactory)


def test_run_local_task_routes_by_key(tmp_path: Path) -> None:
    source = _write(tmp_path / "in" / "events.tsv", ["en\thello", "fr\tsalut", "en\tbye"])
    config = OutputConfig(output_dir=tmp_path / "out", route_by_key=True)
    summary = run_local_task(config, [source], partition=4)
    assert summary.inputs == 1
    assert summary.records == 3
    assert summary.record_counts == {"en/part-m-00004": 2, "fr/part-m-00004": 1}
    assert (tmp_path / "out" / "en" / "part-m-00004").read_text(encoding="utf-8") == "en\thello\nen\tbye\n"


def test_run_local_task_mirrors_input_directories(tmp_path: Path) -> None:
    first = _write(tmp_path / "raw" / "2024" / "05" / "a.log", ["k\t1", "k\t2"])
    second = _write(tmp_path / "raw" / "2024" / "06" / "b.log", ["k\t3"])
    config = OutputConfig(
        output_dir=tmp_path / "out",
        output_format=OutputFormat.JSON,
        trailing_legs=2,
        scope_by_attempt=True,
        job_id="nightly",
    )
    summary = run_local_task(config, [first, second])
    assert summary.record_counts == {"2024/05/part-m-00000": 2, "2024/06/part-m-00000": 1}
    assert summary.work_path == tmp_path / "out" / "_temporary" / "attempt_nightly_m_000000_0"
    rows = (summary.work_path / "2024" / "06" / "part-m-00000.jsonl").read_text(encoding="utf-8")
    assert json.loads(rows) == {"key": "k", "value": "3"}
