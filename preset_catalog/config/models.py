"""Pydantic models for catalog settings and the preset manifest."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator

from pydantic import BaseModel, Field, field_validator

DEFAULT_BASE_URL = "https://a-sync.github.io/fnf-presets/servers-and-mods/"
DEFAULT_COMMITS_API_URL = (
    "https://api.github.com/repos/a-sync/fnf-presets/commits?path=servers-and-mods"
)


class CatalogConfig(BaseModel):
    """Where the catalog lives and how it is retrieved."""

    base_url: str = DEFAULT_BASE_URL
    manifest_name: str = "presets.json"
    request_timeout: float = 20.0
    retry_on_fail: int = 0
    # Keep manifest positions stable by leaving None where no preset was built
    keep_gaps: bool = False
    commits_api_url: str | None = DEFAULT_COMMITS_API_URL
    outputs_dir: Path = Field(default=Path("data/outputs"))
    selections_db: Path = Field(default=Path("data/selections.db"))

    @field_validator("base_url")
    @classmethod
    def _normalise_base(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("base_url cannot be empty")
        return value if value.endswith("/") else value + "/"

    @field_validator("request_timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("request_timeout must be > 0")
        return value

    @field_validator("retry_on_fail")
    @classmethod
    def _non_negative_retries(cls, value: int) -> int:
        if value < 0:
            raise ValueError("retry_on_fail must be >= 0")
        return value

    @field_validator("outputs_dir", "selections_db", mode="before")
    @classmethod
    def _coerce_paths(cls, value: Any) -> Path:
        return Path(value)

    def resolve_path(self, path: Path, base_dir: Path) -> Path:
        """Return ``path`` anchored at ``base_dir`` when relative."""

        if not path.is_absolute():
            return (base_dir / path).resolve()
        return path


class ManifestEntry(BaseModel):
    """Document references for one preset; either may be missing."""

    required: str | None = None
    optional: str | None = None

    @field_validator("required", "optional", mode="before")
    @classmethod
    def _blank_is_missing(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def documents(self) -> Iterator[tuple[str, str]]:
        """Yield ``(document_type, reference)`` for every populated reference."""

        if self.required:
            yield "required", self.required
        if self.optional:
            yield "optional", self.optional


__all__ = ["CatalogConfig", "DEFAULT_BASE_URL", "DEFAULT_COMMITS_API_URL", "ManifestEntry"]
