"""Export presets back into the launcher's import format."""

from .file_exporter import FileExporter
from .launcher import generate

__all__ = ["FileExporter", "generate"]
