"""Typer CLI entrypoint for Ghostsheet."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from .config import ConfigLocator, ConfigRepository, Mode
from .engine import SpreadsheetDocument
from .errors import GhostsheetError
from .logging_conf import configure_logging
from .orchestrator import Ghostsheet, envelope

app = typer.Typer(
    help="Fetch and cache published spreadsheet data",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()


@dataclass
class AppState:
    repository: ConfigRepository
    engine: Ghostsheet


def build_state(verbose: bool, config_path: Path | None = None) -> AppState:
    locator = ConfigLocator(config_path=config_path)
    repository = ConfigRepository(locator)
    config = repository.load()
    configure_logging(verbose=verbose, log_dir=locator.logs_dir)
    return AppState(repository=repository, engine=Ghostsheet(config))


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _run(state: AppState, key: str, mode: Mode):
    try:
        return state.engine.get(key, mode)
    except GhostsheetError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2) from exc


def _render_sheets_table(document: SpreadsheetDocument) -> Table:
    title = document.title or document.key
    table = Table(title=f"{title} · {len(document.sheets)} sheets", box=box.SIMPLE_HEAD)
    table.add_column("Sheet", style="cyan", no_wrap=True)
    table.add_column("ID", style="dim")
    table.add_column("Fields", style="magenta", overflow="fold")
    table.add_column("Items", style="green", justify="right")
    for sheet in document.sheets:
        fields = ", ".join(f"{field.name}:{field.type}" for field in sheet.fields or ())
        table.add_row(sheet.name, sheet.id or "-", fields or "-", str(len(sheet.items)))
    return table


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path."),
) -> None:
    try:
        ctx.obj = build_state(verbose=verbose, config_path=config)
    except GhostsheetError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=2) from exc


@app.command("get", help="Print a spreadsheet as a JSON envelope.")
def get(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Published spreadsheet key."),
    mode: Mode = typer.Option(Mode.LOAD, "--mode", "-m", help="Access mode."),
    pretty: bool = typer.Option(False, "--pretty", help="Indent the JSON output."),
) -> None:
    state = _get_state(ctx)
    settlement = _run(state, key, mode)
    payload = envelope(settlement)
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2 if pretty else None))
    if not settlement.resolved:
        raise typer.Exit(code=1)


@app.command("export", help="Fetch spreadsheets and write each one to a JSON file.")
def export(
    ctx: typer.Context,
    keys: List[str] = typer.Argument(..., help="Published spreadsheet keys."),
    output_dir: Path = typer.Option(Path("."), "--output-dir", "-o", help="Destination directory."),
    mode: Mode = typer.Option(Mode.FETCH, "--mode", "-m", help="Access mode."),
) -> None:
    state = _get_state(ctx)
    output_dir.mkdir(parents=True, exist_ok=True)
    failed: list[str] = []

    for key in keys:
        dest = output_dir / f"{quote(key, safe='')}.json"

        def _write(document: SpreadsheetDocument, key: str = key, dest: Path = dest) -> None:
            try:
                dest.write_text(document.model_dump_json(), encoding="utf-8")
            except OSError:
                failed.append(key)
                console.print(f"[red]Failed to save:[/red] {dest}")
                return
            console.print(f"[green]Fetch data:[/green] {key} → {dest}")

        def _fail(error: GhostsheetError, key: str = key) -> None:
            failed.append(key)
            console.print(f"[red]Failed to fetch:[/red] {key} ({error})")

        _run(state, key, mode).then(_write, _fail)

    if failed:
        raise typer.Exit(code=1)


@app.command("sheets", help="Summarise the sheets of a spreadsheet.")
def sheets(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Published spreadsheet key."),
    mode: Mode = typer.Option(Mode.LOAD, "--mode", "-m", help="Access mode."),
) -> None:
    state = _get_state(ctx)
    settlement = _run(state, key, mode)
    if not settlement.resolved:
        console.print(f"[red]{envelope(settlement)['message']}[/red]")
        raise typer.Exit(code=1)
    console.print(_render_sheets_table(settlement.args[0]))


@app.command("cache-path", help="Show where the cache entry for a key lives.")
def cache_path(ctx: typer.Context, key: str = typer.Argument(..., help="Published spreadsheet key.")) -> None:
    state = _get_state(ctx)
    typer.echo(str(state.engine.store.path_for(key)))


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
