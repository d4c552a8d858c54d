"""Merge required/optional document parses into Preset records."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Literal, MutableMapping

from .models import ModEntry, Preset, PresetMods
from .parser import ParseResult

DocumentType = Literal["required", "optional"]
DOCUMENT_TYPES: tuple[DocumentType, ...] = ("required", "optional")


def identifier_for(reference: str) -> str:
    """Return the base filename of a document reference."""

    return PurePosixPath(reference).name or reference


@dataclass
class PresetBuilder:
    """Mutable accumulator for one manifest index."""

    identifier: str
    display_name: str
    dlc: list[ModEntry] = field(default_factory=list)
    required: list[ModEntry] = field(default_factory=list)
    optional: list[ModEntry] = field(default_factory=list)

    def stamp(self, reference: str, name: str | None) -> None:
        self.identifier = identifier_for(reference)
        self.display_name = name if name is not None else self.identifier

    def build(self) -> Preset:
        return Preset(
            identifier=self.identifier,
            display_name=self.display_name,
            mods=PresetMods(
                dlc=tuple(self.dlc),
                required=tuple(self.required),
                optional=tuple(self.optional),
            ),
        )


def merge(
    index: int,
    document_type: DocumentType,
    reference: str,
    parsed: ParseResult,
    builders: MutableMapping[int, PresetBuilder],
) -> PresetBuilder:
    """Fold one document parse into the builder at ``index``.

    Only a required document may set the identity fields; a later required
    parse for the same index overwrites the earlier one.
    """

    if document_type not in DOCUMENT_TYPES:
        raise ValueError(f"Unknown document type: {document_type!r}")

    builder = builders.get(index)
    if builder is None:
        builder = PresetBuilder(identifier="", display_name="")
        builder.stamp(reference, parsed.name)
        builders[index] = builder
    if document_type == "required":
        builder.stamp(reference, parsed.name)

    for entry in parsed.entries:
        mod = ModEntry(name=entry.display_name, link=entry.link)
        if entry.kind == "Dlc":
            builder.dlc.append(mod)
        elif document_type == "required":
            builder.required.append(mod)
        else:
            builder.optional.append(mod)
    return builder


def compact(
    builders: MutableMapping[int, PresetBuilder],
    size: int,
    keep_gaps: bool = False,
) -> list[Preset | None]:
    """Materialise builders in manifest order.

    With ``keep_gaps`` the result has ``size`` slots and indices without any
    merged document hold ``None``; otherwise those indices are dropped.
    """

    presets: list[Preset | None] = []
    for index in range(size):
        builder = builders.get(index)
        if builder is None:
            if keep_gaps:
                presets.append(None)
            continue
        presets.append(builder.build())
    return presets


__all__ = ["DOCUMENT_TYPES", "DocumentType", "PresetBuilder", "compact", "identifier_for", "merge"]
