"""Configuration loading helpers for multi-output."""

from __future__ import annotations

import json
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..errors import ConfigurationError
from .models import OutputConfig

CONFIG_EXTENSIONS = (".yaml", ".yml", ".json")


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text) or {}
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Cannot parse configuration file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


def load_output_config(path: Path) -> OutputConfig:
    if path.suffix not in CONFIG_EXTENSIONS:
        raise ConfigurationError(f"Unsupported configuration file type: {path.suffix or path.name}")
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")
    payload = _read_file(path)
    try:
        return OutputConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration in {path}:\n{exc}") from exc


def save_output_config(config: OutputConfig, path: Path) -> Path:
    if path.suffix not in CONFIG_EXTENSIONS:
        raise ConfigurationError(f"Unsupported configuration file type: {path.suffix or path.name}")
    path.parent.mkdir(parents=True, exist_ok=True)
    _write_file(path, config.model_dump(mode="json"))
    return path


__all__ = ["CONFIG_EXTENSIONS", "load_output_config", "save_output_config"]
