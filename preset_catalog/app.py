"""Typer CLI entrypoint for the preset catalog."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Optional, Sequence

import typer
from rich.console import Console
from rich.table import Table

from .config import ConfigRepository, ManifestError
from .engine import Fetcher, FileExporter, Preset
from .infra import SelectionStore, SQLiteManager
from .logging_conf import available_logs, configure_logging, tail_log
from .orchestrator import Orchestrator

app = typer.Typer(
    help="Browse mod presets and export launcher preset files",
    no_args_is_help=True,
    rich_markup_mode=None,
)
preset_app = typer.Typer(
    name="preset",
    help="Preset catalog commands",
    no_args_is_help=True,
    rich_markup_mode=None,
)
log_app = typer.Typer(
    name="log",
    help="Log viewing commands",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()


@dataclass
class AppState:
    repository: ConfigRepository
    selections: SelectionStore
    exporter: FileExporter


@dataclass
class CatalogSnapshot:
    presets: list[Preset]
    last_updated: str | None = None


def build_state(verbose: bool) -> AppState:
    configure_logging(verbose)
    repository = ConfigRepository()
    selections = SelectionStore(SQLiteManager(), repository.selections_db())
    exporter = FileExporter(repository.outputs_dir())
    return AppState(repository=repository, selections=selections, exporter=exporter)


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if not isinstance(state, AppState):
        state = build_state(False)
        ctx.obj = state
    return state


async def _load(state: AppState, with_stamp: bool) -> CatalogSnapshot:
    config = state.repository.load_config()
    async with Fetcher(config) as fetcher:
        orchestrator = Orchestrator(config, fetcher)
        if with_stamp:
            presets, stamp = await asyncio.gather(orchestrator.load_catalog(), orchestrator.last_updated())
        else:
            presets, stamp = await orchestrator.load_catalog(), None
    return CatalogSnapshot(presets=[p for p in presets if p is not None], last_updated=stamp)


def load_catalog(state: AppState, with_stamp: bool = False) -> CatalogSnapshot:
    with console.status("Loading presets..."):
        try:
            return asyncio.run(_load(state, with_stamp))
        except ManifestError as exc:
            console.print("Something went wrong... 💩", style="red")
            console.print(str(exc))
            raise typer.Exit(code=1) from exc


def _find_preset(presets: Sequence[Preset], name: str) -> Preset:
    wanted = name.strip().lower()
    for preset in presets:
        if preset.identifier.lower() == wanted or preset.display_name.lower() == wanted:
            return preset
    raise typer.BadParameter(f"Unknown preset: {name}")


def _render_presets_table(presets: Sequence[Preset], selections: SelectionStore) -> Table:
    table = Table(title="Presets")
    table.add_column("Name")
    table.add_column("Required")
    table.add_column("Optional")
    table.add_column("File")
    for preset in presets:
        required = str(len(preset.mods.required))
        if preset.mods.dlc:
            required = f"DLC + {required}"
        optional = "-"
        if preset.mods.optional:
            optional = f"{len(selections.get(preset.identifier))}/{len(preset.mods.optional)}"
        table.add_row(preset.display_name, required, optional, preset.identifier)
    return table


@app.callback()
def main(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    ctx.obj = build_state(verbose)


@preset_app.command("list", help="List presets with their mod counts.")
def preset_list(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    snapshot = load_catalog(state, with_stamp=True)
    console.print(_render_presets_table(snapshot.presets, state.selections))
    for preset in snapshot.presets:
        if preset.mods.dlc:
            names = ", ".join(mod.name for mod in preset.mods.dlc)
            console.print(f"{preset.display_name} DLC: {names}")
    if snapshot.last_updated:
        console.print(f"Last updated @ {snapshot.last_updated}")


@preset_app.command("show", help="Show the required or optional mods of a preset.")
def preset_show(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Preset file name or display name")],
    optional: Annotated[bool, typer.Option("--optional", help="List optional mods")] = False,
) -> None:
    state = _get_state(ctx)
    preset = _find_preset(load_catalog(state).presets, name)
    kind = "optional" if optional else "required"
    console.print(f"{preset.display_name} {kind} mods ({preset.identifier})")
    if optional:
        selected = state.selections.get(preset.identifier)
        for number, mod in enumerate(preset.mods.optional, start=1):
            mark = "[x]" if mod.link in selected else "[ ]"
            console.print(f"{number}. {mark} {mod.name} {mod.link}", markup=False)
        return
    for number, mod in enumerate([*preset.mods.dlc, *preset.mods.required], start=1):
        flag = " ❗" if mod.is_store_dlc else ""
        console.print(f"{number}. {mod.name} {mod.link}{flag}", markup=False)


def _toggle(ctx: typer.Context, name: str, links: list[str], selected: bool) -> None:
    state = _get_state(ctx)
    preset = _find_preset(load_catalog(state).presets, name)
    known = {mod.link for mod in preset.mods.optional}
    for link in links:
        if link not in known:
            raise typer.BadParameter(f"{link} is not an optional mod of {preset.display_name}")
    current: dict[str, bool] = {}
    for link in links:
        current = state.selections.toggle(preset.identifier, link, selected)
    console.print(f"{preset.display_name}: {len(current)}/{len(preset.mods.optional)} optional mods selected")


@preset_app.command("select", help="Select optional mods for a preset.")
def preset_select(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Preset file name or display name")],
    links: Annotated[list[str], typer.Argument(help="Links of optional mods")],
) -> None:
    _toggle(ctx, name, links, True)


@preset_app.command("deselect", help="Deselect optional mods for a preset.")
def preset_deselect(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Preset file name or display name")],
    links: Annotated[list[str], typer.Argument(help="Links of optional mods")],
) -> None:
    _toggle(ctx, name, links, False)


@preset_app.command("export", help="Write a launcher preset file with the selected optional mods.")
def preset_export(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Preset file name or display name")],
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Output directory")] = None,
) -> None:
    state = _get_state(ctx)
    preset = _find_preset(load_catalog(state).presets, name)
    exporter = FileExporter(output) if output is not None else state.exporter
    path = exporter.export(preset, state.selections.get(preset.identifier))
    console.print(f"Exported {preset.display_name} to {path}")


@log_app.command("list", help="List available log files.")
def log_list() -> None:
    logs = list(available_logs())
    if not logs:
        console.print("No log files yet.")
        return
    for path in logs:
        console.print(path.name)


@log_app.command("show", help="Show the tail of a log file.")
def log_show(
    name: Annotated[str, typer.Argument(help="Log file name, e.g. catalog.log")] = "catalog.log",
    lines: Annotated[int, typer.Option("--lines", "-n", help="Number of lines")] = 50,
) -> None:
    match = next((path for path in available_logs() if path.name == name), None)
    if match is None:
        raise typer.BadParameter(f"Unknown log file: {name}")
    for line in tail_log(match, lines):
        console.print(line.rstrip("\n"), markup=False)


app.add_typer(preset_app)
app.add_typer(log_app)


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
