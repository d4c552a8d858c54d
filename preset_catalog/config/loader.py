"""Configuration and manifest loading helpers."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

import yaml
from pydantic import TypeAdapter, ValidationError

from .models import CatalogConfig, ManifestEntry

CONFIG_FILENAME = "catalog_config.yaml"

_MANIFEST_ADAPTER = TypeAdapter(list[ManifestEntry])


class ManifestError(RuntimeError):
    """The manifest could not be retrieved or understood; nothing can be loaded."""


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


def parse_manifest(text: str) -> list[ManifestEntry]:
    """Validate manifest JSON: an ordered list of ``{required, optional}`` objects."""

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ManifestError(f"Manifest is not valid JSON: {exc}") from exc
    try:
        return _MANIFEST_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        raise ManifestError(f"Manifest has an unexpected shape: {exc}") from exc


@dataclass(slots=True)
class ConfigLocator:
    """Resolve important paths from project root."""

    project_root: Path | None = None
    data_dir: Path | None = None
    outputs_dir: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get("PRESET_CATALOG_HOME")
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path(__file__).resolve().parents[2]).resolve()
        self.project_root = root
        self.data_dir = (root / "data").resolve()
        self.outputs_dir = (self.data_dir / "outputs").resolve()
        self.logs_dir = (root / "logs").resolve()
        self.ensure_directories()

    def ensure_directories(self) -> None:
        for directory in (self.data_dir, self.outputs_dir, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def config_path(self) -> Path:
        return self.data_dir / CONFIG_FILENAME


class ConfigRepository:
    """Repository encapsulating config IO and schema validation."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self._cache: CatalogConfig | None = None

    def load_config(self) -> CatalogConfig:
        if self._cache is not None:
            return self._cache
        path = self.locator.config_path()
        if path.exists():
            config = CatalogConfig.model_validate(_read_file(path))
        else:
            config = CatalogConfig()
            self.save_config(config)
        self._cache = config
        return config

    def save_config(self, config: CatalogConfig) -> None:
        _write_file(self.locator.config_path(), config.model_dump(mode="json"))
        self._cache = config

    def outputs_dir(self) -> Path:
        config = self.load_config()
        return config.resolve_path(config.outputs_dir, self.locator.project_root)

    def selections_db(self) -> Path:
        config = self.load_config()
        return config.resolve_path(config.selections_db, self.locator.project_root)


__all__ = ["CONFIG_FILENAME", "ConfigLocator", "ConfigRepository", "ManifestError", "parse_manifest"]
