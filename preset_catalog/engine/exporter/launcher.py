"""Render a preset as an Arma 3 Launcher preset document."""

from __future__ import annotations

from html import escape
from string import Template
from typing import Container, Iterable

from ..models import ModEntry, Preset

CATALOG_URL = "https://a-sync.github.io/fnf-presets"

PRESET_TEMPLATE = Template(
    '<?xml version="1.0" encoding="utf-8"?><html>'
    f"<!--Created by {CATALOG_URL}-->"
    '<head><meta name="arma:Type" content="preset" />'
    '<meta name="arma:PresetName" content="$preset_name" />'
    f'<meta name="generator" content="Arma 3 Launcher - {CATALOG_URL}" />'
    "<title>Arma 3</title>"
    '<link href="https://fonts.googleapis.com/css?family=Roboto" rel="stylesheet" type="text/css" />'
    "<style>body{margin:0;padding:0;color:#fff;background:#000}"
    "body,td,th{font:95%/1.3 Roboto, Segoe UI, Tahoma, Arial, Helvetica, sans-serif}"
    "td{padding:3px 30px 3px 0}"
    "h1{padding:20px 20px 0 72px;color:white;font-weight:200;font-family:segoe ui;font-size:3em;margin:0;"
    f"background:transparent url({CATALOG_URL}/fnf-logo.png) 3px 15px no-repeat;background-size: 64px auto;}}"
    "em{font-variant:italic;color:silver}"
    ".before-list{padding:5px 20px 10px}"
    ".mod-list{background:#222222;padding:20px}"
    ".dlc-list{background:#222222;padding:20px}"
    ".footer{padding:20px;color:gray}"
    ".whups{color:gray}"
    "a{color:#D18F21;text-decoration:underline}"
    "a:hover{color:#F1AF41;text-decoration:none}"
    ".from-steam{color:#449EBD}"
    ".from-local{color:gray}</style></head>"
    "<body><h1>Arma 3 - Preset <strong>$preset_name</strong></h1>"
    '<p class="before-list"><em>Drag this file or link to it to Arma 3 Launcher or open it Mods / Preset / Import.</em></p>'
    '<div class="mod-list"><table>$mod_list</table></div>'
    '<div class="dlc-list"><table>$dlc_list</table></div>'
    f'<div class="footer"><span>Created by <a href="{CATALOG_URL}">{CATALOG_URL}</a></span></div>'
    "</body></html>"
)

MOD_ROW = Template(
    '<tr data-type="ModContainer"><td data-type="DisplayName">$name</td>'
    '<td><span class="from-steam">Steam</span></td>'
    '<td><a href="$link" data-type="Link">$link</a></td></tr>'
)
DLC_ROW = Template(
    '<tr data-type="DlcContainer"><td data-type="DisplayName">$name</td>'
    '<td><a href="$link" data-type="Link">$link</a></td></tr>'
)


def _rows(template: Template, mods: Iterable[ModEntry]) -> str:
    return "".join(
        template.substitute(name=escape(mod.name), link=escape(mod.link)) for mod in mods
    )


def generate(preset: Preset, selection: Container[str]) -> str:
    """Serialise required mods, selected optionals and DLC into one document.

    Pure: the caller decides where the returned markup goes.
    """

    return PRESET_TEMPLATE.substitute(
        preset_name=escape(preset.display_name),
        mod_list=_rows(MOD_ROW, preset.effective_required(selection)),
        dlc_list=_rows(DLC_ROW, preset.mods.dlc),
    )


__all__ = ["CATALOG_URL", "PRESET_TEMPLATE", "generate"]
