from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from multi_output.app import _unescape, app


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("multi_output.app.configure_logging", lambda verbose=False, log_dir=None: None)


def _input(tmp_path: Path) -> Path:
    path = tmp_path / "data" / "sales" / "day1.tsv"
    path.parent.mkdir(parents=True)
    path.write_text("north\t10\nsouth\t4\nnorth\t7\n", encoding="utf-8")
    return path


def test_cli_route_by_key(tmp_path: Path) -> None:
    source = _input(tmp_path)
    out = tmp_path / "out"
    runner = CliRunner()
    result = runner.invoke(app, ["route", str(source), "--output-dir", str(out), "--by-key"])
    assert result.exit_code == 0, result.stdout
    assert "north/part-m-00000" in result.stdout
    assert "Total" in result.stdout
    assert (out / "north" / "part-m-00000").read_text(encoding="utf-8") == "north\t10\nnorth\t7\n"
    assert (out / "south" / "part-m-00000").exists()


def test_cli_route_with_config_file(tmp_path: Path) -> None:
    source = _input(tmp_path)
    config_path = tmp_path / "job.yaml"
    config_path.write_text(
        yaml.safe_dump(
            {"output_dir": str(tmp_path / "out"), "output_format": "csv", "trailing_legs": 1}
        ),
        encoding="utf-8",
    )
    runner = CliRunner()
    result = runner.invoke(app, ["route", str(source), "--config", str(config_path), "--partition", "2"])
    assert result.exit_code == 0, result.stdout
    lines = (tmp_path / "out" / "sales" / "part-m-00002.csv").read_text(encoding="utf-8").splitlines()
    assert lines == ["key,value", "north,10", "south,4", "north,7"]


def test_cli_route_rejects_existing_output(tmp_path: Path) -> None:
    source = _input(tmp_path)
    out = tmp_path / "out"
    runner = CliRunner()
    assert runner.invoke(app, ["route", str(source), "-o", str(out)]).exit_code == 0
    result = runner.invoke(app, ["route", str(source), "-o", str(out)])
    assert result.exit_code == 1
    assert "Routing failed" in result.stdout


def test_cli_route_custom_separator(tmp_path: Path) -> None:
    source = tmp_path / "in.csv"
    source.write_text("a,1\nb,2\n", encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(
        app, ["route", str(source), "-o", str(tmp_path / "out"), "--separator", ",", "--by-key"]
    )
    assert result.exit_code == 0, result.stdout
    assert (tmp_path / "out" / "a" / "part-m-00000").read_text(encoding="utf-8") == "a,1\n"


def test_cli_resolve() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["resolve", "/a/b/c/file.txt", "--trailing-legs", "2"])
    assert result.exit_code == 0, result.stdout
    assert result.stdout.strip() == "b/c/part-m-00000"


def test_cli_init_config(tmp_path: Path) -> None:
    target = tmp_path / "job.yaml"
    runner = CliRunner()
    result = runner.invoke(app, ["init-config", str(target)])
    assert result.exit_code == 0, result.stdout
    payload = yaml.safe_load(target.read_text(encoding="utf-8"))
    assert payload["output_format"] == "text"
    assert payload["trailing_legs"] == 0

    result = runner.invoke(app, ["init-config", str(target)])
    assert result.exit_code == 1
    result = runner.invoke(app, ["init-config", str(target), "--force"])
    assert result.exit_code == 0


def test_cli_route_reports_undecodable_input(tmp_path: Path) -> None:
    source = tmp_path / "broken.tsv"
    source.write_bytes(b"k\t\xff\xfe\n")
    runner = CliRunner()
    result = runner.invoke(app, ["route", str(source), "-o", str(tmp_path / "out")])
    assert result.exit_code == 1
    assert "Routing failed" in result.stdout
    assert isinstance(result.exception, SystemExit)


def test_unescape_only_expands_known_escapes() -> None:
    assert _unescape("§\\t") == "§\t"
    assert _unescape("\\n") == "\n"
    assert _unescape("\\\\") == "\\"
    assert _unescape("a\\xb") == "a\\xb"
    assert _unescape(",") == ","


def test_cli_route_non_ascii_separator(tmp_path: Path) -> None:
    source = tmp_path / "in.txt"
    source.write_text("a§1\nb§2\n", encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(
        app, ["route", str(source), "-o", str(tmp_path / "out"), "--separator", "§", "--by-key"]
    )
    assert result.exit_code == 0, result.stdout
    assert (tmp_path / "out" / "b" / "part-m-00000").read_text(encoding="utf-8") == "b§2\n"
