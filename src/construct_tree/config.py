"""Configuration management for Construct Tree."""

import json
import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ValidationError

from . import CONFIG_FILE, OUT_DIR
from .errors import ConfigError

LogLevel = Literal["debug", "info", "warning", "error"]

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


class TreeConfig(BaseModel):
    """Configuration for Construct Tree."""

    outdir: str = OUT_DIR
    tree_metadata: bool = True
    log_level: LogLevel = "warning"


def get_config_path(project_root: Path) -> Path:
    """Location of ctree.json within a project."""
    return project_root / CONFIG_FILE


def load_config(project_root: Path) -> TreeConfig:
    """Read ctree.json from project_root, then apply CTREE_* overrides.

    A missing file yields the defaults.

    Raises:
        ConfigError: if the file exists but cannot be read or validated
    """
    config_path = get_config_path(project_root)
    if not config_path.exists():
        return _apply_env_overrides(TreeConfig())

    try:
        with open(config_path, encoding="utf-8") as f:
            config = TreeConfig.model_validate(json.load(f))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
        raise ConfigError(f"Invalid config file {config_path}: {e}") from e

    return _apply_env_overrides(config)


def save_config(config: TreeConfig, project_root: Path) -> None:
    """Write config to ctree.json, creating project_root if needed."""
    project_root.mkdir(parents=True, exist_ok=True)
    with open(get_config_path(project_root), "w", encoding="utf-8") as f:
        json.dump(config.model_dump(), f, indent=2)


def _apply_env_overrides(config: TreeConfig) -> TreeConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    # CTREE_OUTDIR
    if outdir := os.environ.get("CTREE_OUTDIR"):
        data["outdir"] = outdir

    # CTREE_TREE_METADATA
    if flag := os.environ.get("CTREE_TREE_METADATA"):
        if flag.lower() in _TRUE_VALUES:
            data["tree_metadata"] = True
        elif flag.lower() in _FALSE_VALUES:
            data["tree_metadata"] = False

    # CTREE_LOG_LEVEL
    if level := os.environ.get("CTREE_LOG_LEVEL"):
        if level.lower() in ("debug", "info", "warning", "error"):
            data["log_level"] = level.lower()

    return TreeConfig.model_validate(data)
