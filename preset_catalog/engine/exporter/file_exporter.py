"""Write exported preset documents to disk."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Container

from ..models import Preset
from .launcher import generate


class FileExporter:
    """Persist generated documents under an output directory."""

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, preset: Preset) -> Path:
        filename = re.sub(r"[^0-9A-Za-z._-]+", "_", preset.identifier.strip()) or "preset.html"
        return self.output_dir / filename

    def export(self, preset: Preset, selection: Container[str]) -> Path:
        path = self.path_for(preset)
        path.write_text(generate(preset, selection), encoding="utf-8")
        return path


__all__ = ["FileExporter"]
