"""Parse launcher preset documents into mod/DLC entries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Literal

import structlog
from selectolax.lexbor import LexborHTMLParser, LexborNode

EntryKind = Literal["Mod", "Dlc"]

PRESET_NAME_SELECTOR = 'meta[name="arma:PresetName"]'
ROW_SELECTOR = "tr[data-type]"
DISPLAY_NAME_SELECTOR = 'td[data-type="DisplayName"]'
LINK_SELECTOR = 'a[data-type="Link"]'

_ROW_KINDS: dict[str, EntryKind] = {
    "ModContainer": "Mod",
    "DlcContainer": "Dlc",
}


@dataclass(frozen=True, slots=True)
class ParsedEntry:
    """One table row; the document stores the link both as href and as label."""

    kind: EntryKind
    display_name: str
    href: str
    label: str

    @property
    def link(self) -> str:
        return self.href

    @property
    def consistent(self) -> bool:
        return self.href == self.label


class ParsedEntries:
    """Re-iterable view over the rows of a parsed document.

    Each iteration walks the tree again, so consumers may loop more than once.
    """

    def __init__(self, tree: LexborHTMLParser | None, logger: structlog.BoundLogger) -> None:
        self._tree = tree
        self._logger = logger

    def __iter__(self) -> Iterator[ParsedEntry]:
        if self._tree is None:
            return
        for row in self._tree.css(ROW_SELECTOR):
            entry = _entry_from_row(row)
            if entry is None:
                continue
            if not entry.consistent:
                self._logger.warning(
                    "link_mismatch",
                    name=entry.display_name,
                    href=entry.href,
                    label=entry.label,
                )
            yield entry


@dataclass
class ParseResult:
    """Preset name (when the document declares one) and its entries."""

    name: str | None
    entries: ParsedEntries


def _entry_from_row(row: LexborNode) -> ParsedEntry | None:
    kind = _ROW_KINDS.get(row.attributes.get("data-type") or "")
    if kind is None:
        return None
    name_node = row.css_first(DISPLAY_NAME_SELECTOR)
    link_node = row.css_first(LINK_SELECTOR)
    if name_node is None or link_node is None:
        return None
    return ParsedEntry(
        kind=kind,
        display_name=name_node.text(strip=True),
        href=(link_node.attributes.get("href") or "").strip(),
        label=link_node.text(strip=True),
    )


class DocumentParser:
    """Extract the preset name and mod table from a launcher preset document.

    Extraction is pattern based: rows that do not carry a display name cell and
    a link anchor are ignored, and malformed markup never raises.
    """

    def __init__(self, logger: structlog.BoundLogger | None = None) -> None:
        self.logger = logger or structlog.get_logger("preset_catalog.parser")

    def parse(self, raw_text: str) -> ParseResult:
        if not raw_text or not raw_text.strip():
            return ParseResult(name=None, entries=ParsedEntries(None, self.logger))
        tree = LexborHTMLParser(raw_text)
        return ParseResult(name=self.parse_name(tree), entries=ParsedEntries(tree, self.logger))

    @staticmethod
    def parse_name(tree: LexborHTMLParser) -> str | None:
        node = tree.css_first(PRESET_NAME_SELECTOR)
        if node is None:
            return None
        return node.attributes.get("content")


__all__ = ["DocumentParser", "EntryKind", "ParseResult", "ParsedEntries", "ParsedEntry"]
