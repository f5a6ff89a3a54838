"""Typer CLI entrypoint for multi-output."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, List, Optional

import typer
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.table import Table
from typer import BadParameter

from .config import OutputConfig, OutputFormat, load_output_config, save_output_config
from .context import INPUT_FILE_KEY, TRAILING_LEGS_KEY, JobConfiguration
from .errors import MultiOutputError
from .logging_conf import configure_logging
from .naming import input_aware_name
from .task import TaskSummary, run_local_task

app = typer.Typer(
    help="Split record files into many outputs named after their content.",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()


_ESCAPES = {"t": "\t", "n": "\n", "\\": "\\"}
_ESCAPE_RE = re.compile(r"\\([tn\\])")


def _unescape(value: str) -> str:
    """Expand only `\\t`, `\\n` and `\\\\`; everything else is kept verbatim."""

    return _ESCAPE_RE.sub(lambda match: _ESCAPES[match.group(1)], value)


def _merge_config(base: OutputConfig, overrides: dict[str, Any]) -> OutputConfig:
    payload = base.model_dump()
    payload.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return OutputConfig.model_validate(payload)
    except ValidationError as exc:
        raise BadParameter(str(exc)) from exc


def _render_summary(summary: TaskSummary) -> Table:
    table = Table(
        title=f"{summary.attempt} · {len(summary.record_counts)} destination(s)",
        box=box.SIMPLE_HEAD,
    )
    table.add_column("Destination", style="cyan", overflow="fold")
    table.add_column("Records", style="green", justify="right")
    for destination, count in summary.record_counts.items():
        table.add_row(destination, str(count))
    table.add_row("Total", str(summary.records), style="bold")
    return table


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Also write JSON logs to this directory."),
) -> None:
    configure_logging(verbose=verbose, log_dir=log_dir)


@app.command("route", help="Route every input line to a destination derived from its content.")
def route(
    inputs: List[Path] = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Input files."),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML/JSON OutputConfig file."),
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", "-o", help="Output directory."),
    output_format: Optional[OutputFormat] = typer.Option(None, "--format", "-f", help="Destination format."),
    trailing_legs: Optional[int] = typer.Option(
        None, "--trailing-legs", help="Mirror this many trailing input directories into output names."
    ),
    by_key: Optional[bool] = typer.Option(None, "--by-key/--no-by-key", help="Name destinations after record keys."),
    separator: Optional[str] = typer.Option(None, "--separator", help="Key/value separator, escapes allowed."),
    base_name: Optional[str] = typer.Option(None, "--base-name", help="Leaf file base name."),
    scope_by_attempt: Optional[bool] = typer.Option(
        None, "--scope-by-attempt/--no-scope-by-attempt", help="Write under _temporary/<attempt>."
    ),
    partition: int = typer.Option(0, "--partition", min=0, help="Task partition number."),
) -> None:
    try:
        base = load_output_config(config_path) if config_path else OutputConfig()
        config = _merge_config(
            base,
            {
                "output_dir": output_dir,
                "output_format": output_format,
                "trailing_legs": trailing_legs,
                "route_by_key": by_key,
                "separator": _unescape(separator) if separator is not None else None,
                "base_name": base_name,
                "scope_by_attempt": scope_by_attempt,
            },
        )
        summary = run_local_task(config, inputs, partition=partition)
    except MultiOutputError as exc:
        console.print(f"Routing failed: {exc}", style="red")
        raise typer.Exit(code=1) from exc
    console.print(_render_summary(summary))
    console.print(f"Output written under {summary.work_path}", style="dim")


@app.command("resolve", help="Show the destination name a record from INPUT_PATH would get.")
def resolve(
    input_path: str = typer.Argument(..., help="Input file path or URI."),
    name: str = typer.Option("part-m-00000", "--name", help="Candidate leaf name."),
    trailing_legs: int = typer.Option(1, "--trailing-legs", help="Trailing input directories to use."),
) -> None:
    configuration = JobConfiguration({INPUT_FILE_KEY: input_path, TRAILING_LEGS_KEY: trailing_legs})
    console.print(input_aware_name(configuration, name))


@app.command("init-config", help="Write a default configuration file.")
def init_config(
    path: Path = typer.Argument(..., help="Target .yaml/.yml/.json file."),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file."),
) -> None:
    if path.exists() and not force:
        console.print(f"{path} already exists, use --force to overwrite.", style="yellow")
        raise typer.Exit(code=1)
    try:
        save_output_config(OutputConfig(), path)
    except MultiOutputError as exc:
        console.print(str(exc), style="red")
        raise typer.Exit(code=1) from exc
    console.print(f"Configuration written to {path}")


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
