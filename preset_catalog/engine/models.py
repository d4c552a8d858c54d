"""Domain records produced by the ingestion pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Container

STORE_DLC_MARKER = "store.steampowered.com/app/"


@dataclass(frozen=True, slots=True)
class ModEntry:
    """A single mod or DLC row."""

    name: str
    link: str

    @property
    def is_store_dlc(self) -> bool:
        return STORE_DLC_MARKER in self.link


@dataclass(frozen=True, slots=True)
class PresetMods:
    """Mods of a preset bucketed by role, each in document order."""

    dlc: tuple[ModEntry, ...] = ()
    required: tuple[ModEntry, ...] = ()
    optional: tuple[ModEntry, ...] = ()


@dataclass(frozen=True, slots=True)
class Preset:
    """Merged record of one mod loadout."""

    identifier: str
    display_name: str
    mods: PresetMods = field(default_factory=PresetMods)

    def selected_optional(self, selection: Container[str]) -> list[ModEntry]:
        """Return optional mods whose link is selected, in optional-list order."""

        return [mod for mod in self.mods.optional if mod.link in selection]

    def effective_required(self, selection: Container[str]) -> list[ModEntry]:
        return [*self.mods.required, *self.selected_optional(selection)]


__all__ = ["ModEntry", "Preset", "PresetMods", "STORE_DLC_MARKER"]
