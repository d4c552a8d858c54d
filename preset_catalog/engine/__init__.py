"""Engine components: fetch → parse → merge → export."""

from .exporter import FileExporter, generate
from .fetcher import FetchRequest, FetchResponse, Fetcher
from .merge import DOCUMENT_TYPES, DocumentType, PresetBuilder, compact, merge
from .models import ModEntry, Preset, PresetMods
from .parser import DocumentParser, ParsedEntry, ParseResult

__all__ = [
    "DOCUMENT_TYPES",
    "DocumentParser",
    "DocumentType",
    "FetchRequest",
    "FetchResponse",
    "Fetcher",
    "FileExporter",
    "ModEntry",
    "ParseResult",
    "ParsedEntry",
    "Preset",
    "PresetBuilder",
    "PresetMods",
    "compact",
    "generate",
    "merge",
]
