"""Project discovery and configuration for the ``.designdiff/`` directory."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path

from pydantic import ValidationError

from .models import DesignDiffConfig

logger = logging.getLogger(__name__)

PROJECT_DIR = ".designdiff"
CONFIG_FILE = "config.toml"


class ConfigError(ValueError):
    """Raised when a config file cannot be parsed or validated."""


def find_project_root(start: Path) -> Path | None:
    """Walk up from *start* looking for a ``.designdiff/`` directory."""
    start = start.resolve()
    for directory in [start, *start.parents]:
        if (directory / PROJECT_DIR).is_dir():
            return directory
    return None


def load_config_file(path: Path) -> DesignDiffConfig:
    """Parse and validate a single TOML config file."""
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc

    try:
        config = DesignDiffConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings in {path}: {exc}") from exc

    logger.debug("Loaded config from %s", path)
    return config


def load_config(project_dir: Path) -> DesignDiffConfig:
    """Read ``config.toml`` from *project_dir*; defaults when it is missing."""
    path = project_dir / CONFIG_FILE
    if not path.is_file():
        return DesignDiffConfig()
    return load_config_file(path)


def save_config(project_dir: Path, config: DesignDiffConfig) -> Path:
    """Write *config* back to ``config.toml``, creating the directory if needed."""
    project_dir.mkdir(parents=True, exist_ok=True)
    lines: list[str] = []
    if config.file_key is not None:
        lines.append(f"file_key = {_toml_str(config.file_key)}")
    lines.append(f"indent = {config.indent}")
    lines.append("")
    lines.append("[readiness]")
    for field, values in config.readiness.model_dump().items():
        items = ", ".join(_toml_str(v) for v in values)
        lines.append(f"{field} = [{items}]")
    path = project_dir / CONFIG_FILE
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def _toml_str(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def resolve_config(start: Path | None = None, config_path: Path | None = None) -> DesignDiffConfig:
    """Config from an explicit file, else the nearest project, else defaults."""
    if config_path is not None:
        if not config_path.is_file():
            raise ConfigError(f"Config file not found: {config_path}")
        return load_config_file(config_path)

    root = find_project_root(start or Path.cwd())
    if root is None:
        return DesignDiffConfig()
    return load_config(root / PROJECT_DIR)
