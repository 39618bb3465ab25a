"""Configuration loading helpers for Ghostsheet."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..errors import ConfigurationError
from .models import GhostsheetConfig

CONFIG_EXTENSIONS = (".yaml", ".yml", ".json")
CONFIG_FILENAME = "ghostsheet.yaml"


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


@dataclass(slots=True)
class ConfigLocator:
    """Resolve important paths from project root."""

    project_root: Path | None = None
    config_path: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get("GHOSTSHEET_HOME")
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path.cwd()).resolve()
        self.project_root = root
        if self.config_path is None:
            self.config_path = root / CONFIG_FILENAME
        self.logs_dir = (root / "logs").resolve()


class ConfigRepository:
    """Repository encapsulating config IO and schema validation."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self._cache: GhostsheetConfig | None = None

    def load(self) -> GhostsheetConfig:
        if self._cache is not None:
            return self._cache
        path = self.locator.config_path
        if path.suffix not in CONFIG_EXTENSIONS:
            raise ConfigurationError(f"Unsupported configuration format: {path}")
        payload = _read_file(path) if path.exists() else {}
        self._cache = self._resolve_paths(build_config(payload))
        return self._cache

    def save(self, config: GhostsheetConfig) -> Path:
        path = self.locator.config_path
        _write_file(path, config.model_dump(mode="json"))
        self._cache = self._resolve_paths(config)
        return path

    def _resolve_paths(self, config: GhostsheetConfig) -> GhostsheetConfig:
        if config.cache_dir.is_absolute():
            return config
        return config.model_copy(update={"cache_dir": self.locator.project_root / config.cache_dir})


def build_config(payload: dict | None = None, **overrides) -> GhostsheetConfig:
    """Validate options, translating schema failures into ``ConfigurationError``."""

    options = dict(payload or {})
    options.update(overrides)
    try:
        return GhostsheetConfig.model_validate(options)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


__all__ = ["CONFIG_EXTENSIONS", "ConfigLocator", "ConfigRepository", "build_config"]
