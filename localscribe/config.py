"""
localscribe.config - YAML config loading and validation.

Handles loading localscribe.yaml, validating engine and concurrency
settings, and resolving the packaged model file location.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from localscribe.exceptions import ConfigError

CONFIG_FILENAME = "localscribe.yaml"
DEFAULT_MODEL_PATH = Path("models/ggml-tiny.en.bin")


class LocalscribeConfig(BaseModel):
    """Resolved configuration for the transcription runtime."""

    model_path: Path = DEFAULT_MODEL_PATH
    resource_dir: Path | None = None

    n_threads: int | None = Field(default=None, gt=0)
    max_workers: int = Field(default=2, gt=0)

    config_path: Path | None = None

    @field_validator("model_path")
    @classmethod
    def validate_model_path(cls, v: Path) -> Path:
        if not str(v).strip() or str(v) == ".":
            raise ValueError("model_path must not be empty")
        return v


def load_config(config_dir: Path) -> LocalscribeConfig:
    """Load and validate configuration from a directory.

    Raises:
        FileNotFoundError: If no localscribe.yaml exists in config_dir
        ConfigError: If the file is not a mapping or fails validation
    """
    config_file = config_dir / CONFIG_FILENAME
    if not config_file.exists():
        raise FileNotFoundError(f"No {CONFIG_FILENAME} found in {config_dir}")

    try:
        with open(config_file, encoding="utf-8") as f:
            raw_config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_file}: {e}") from e

    if not isinstance(raw_config, dict):
        raise ConfigError(f"{config_file} must contain a mapping, got {type(raw_config).__name__}")

    raw_config["config_path"] = config_file

    try:
        return LocalscribeConfig(**raw_config)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_file}: {e}") from e


def find_config_dir(start: Path | None = None) -> Path | None:
    """Find the nearest directory containing localscribe.yaml, walking upwards."""
    current = (start or Path.cwd()).resolve()
    while current != current.parent:
        if (current / CONFIG_FILENAME).exists():
            return current
        current = current.parent
    return None


def resolve_model_path(config: LocalscribeConfig) -> Path:
    """Resolve the model file against the resource directory.

    Absolute model paths are returned unchanged. Relative paths are resolved
    against ``resource_dir``, then the config file's directory, then the CWD.
    """
    model_path = config.model_path.expanduser()
    if model_path.is_absolute():
        return model_path

    if config.resource_dir is not None:
        base = config.resource_dir.expanduser()
    elif config.config_path is not None:
        base = config.config_path.parent
    else:
        base = Path.cwd()
    return (base / model_path).resolve()


def create_default_config() -> dict[str, Any]:
    """Create a default config dict for a new installation."""
    return {
        "model_path": str(DEFAULT_MODEL_PATH),
        "n_threads": None,
        "max_workers": 2,
    }


def write_config(config: dict[str, Any], path: Path) -> None:
    """Write configuration to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)
