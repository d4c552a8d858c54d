"""Shared fixtures: sample documents, fake transports and a recording logger."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from typing import Any, Callable, Iterable, Mapping

import httpx
import pytest

from preset_catalog.config import CatalogConfig, ConfigLocator, ConfigRepository

BASE_URL = "https://presets.example/servers-and-mods/"


def mod_row(name: str, link: str, label: str | None = None) -> str:
    return (
        '<tr data-type="ModContainer">'
        f'<td data-type="DisplayName">{name}</td>'
        '<td><span class="from-steam">Steam</span></td>'
        f'<td><a href="{link}" data-type="Link">{label if label is not None else link}</a></td>'
        "</tr>"
    )


def dlc_row(name: str, link: str) -> str:
    return (
        '<tr data-type="DlcContainer">'
        f'<td data-type="DisplayName">{name}</td>'
        f'<td><a href="{link}" data-type="Link">{link}</a></td>'
        "</tr>"
    )


def preset_document(name: str | None, rows: Iterable[str]) -> str:
    meta = f'<meta name="arma:PresetName" content="{name}" />' if name is not None else ""
    return (
        '<?xml version="1.0" encoding="utf-8"?><html><head>'
        '<meta name="arma:Type" content="preset" />'
        f"{meta}</head><body>"
        f'<div class="mod-list"><table>{"".join(rows)}</table></div>'
        "</body></html>"
    )


class RecordingLogger:
    """Minimal stand-in for a structlog BoundLogger that remembers events."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict[str, Any]]] = []

    def bind(self, **_kwargs: Any) -> "RecordingLogger":
        return self

    def _record(self, level: str, event: str, **kwargs: Any) -> None:
        self.events.append((level, event, kwargs))

    def debug(self, event: str, **kwargs: Any) -> None:
        self._record("debug", event, **kwargs)

    def info(self, event: str, **kwargs: Any) -> None:
        self._record("info", event, **kwargs)

    def warning(self, event: str, **kwargs: Any) -> None:
        self._record("warning", event, **kwargs)

    def error(self, event: str, **kwargs: Any) -> None:
        self._record("error", event, **kwargs)

    def named(self, event: str) -> list[dict[str, Any]]:
        return [kwargs for _level, name, kwargs in self.events if name == event]


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def catalog_config(tmp_path: Path) -> CatalogConfig:
    return CatalogConfig(
        base_url=BASE_URL,
        commits_api_url=None,
        outputs_dir=tmp_path / "outputs",
        selections_db=tmp_path / "selections.db",
    )


@pytest.fixture
def make_transport() -> Callable[..., httpx.MockTransport]:
    """Serve documents by file name; names mapped to an int answer with that status."""

    def _builder(documents: Mapping[str, str | int], calls: list[str] | None = None) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            name = request.url.path.rsplit("/", 1)[-1]
            if calls is not None:
                calls.append(name)
            payload = documents.get(name)
            if payload is None:
                return httpx.Response(404, text="missing")
            if isinstance(payload, int):
                return httpx.Response(payload, text="error")
            return httpx.Response(200, text=payload)

        return httpx.MockTransport(handler)

    return _builder


@pytest.fixture
def temp_config_repository(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterable[ConfigRepository]:
    monkeypatch.setenv("PRESET_CATALOG_HOME", str(tmp_path))
    locator = ConfigLocator(project_root=tmp_path)
    repository = ConfigRepository(locator)
    yield repository


@pytest.fixture
def docs() -> SimpleNamespace:
    """Builders for launcher preset markup."""

    return SimpleNamespace(mod_row=mod_row, dlc_row=dlc_row, preset_document=preset_document)
