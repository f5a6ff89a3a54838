"""Configuration package exports."""

from .loader import CONFIG_EXTENSIONS, load_output_config, save_output_config
from .models import OutputConfig, OutputFormat

__all__ = [
    "CONFIG_EXTENSIONS",
    "OutputConfig",
    "OutputFormat",
    "load_output_config",
    "save_output_config",
]
