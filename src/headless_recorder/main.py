"""
Headless Recorder - CLI Entry Point.

Configuration Priority:
    1. CLI arguments (--state, --memory, etc.)
    2. Environment variables (HEADLESS_RECORDER__STORAGE__PATH, etc.)
    3. Config file (headless-recorder.yaml)

Usage:
    headless-recorder replay triggers.jsonl --url https://example.com
    headless-recorder state
    headless-recorder code --flavor playwright
    headless-recorder reset
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from headless_recorder.background.service import BackgroundService
from headless_recorder.background.state import SessionRepository, SessionState
from headless_recorder.codegen import CodeGenerator
from headless_recorder.config import Settings, load_config
from headless_recorder.exceptions import HeadlessRecorderError
from headless_recorder.services.browser import InMemoryBrowser
from headless_recorder.services.constants import OPTIONS_KEY
from headless_recorder.services.storage import MemoryStateStore, StateStore, create_state_store
from headless_recorder.utils.logging import setup_logging_from_settings

# Create the CLI app
app = typer.Typer(
    name="headless-recorder",
    help="Background coordinator for recording browser sessions into automation code",
    add_completion=False,
)

console = Console()

CHANNELS = ("runtime", "popup", "navigation", "before_navigate")


def _settings(config: Optional[Path], state: Optional[Path]) -> Settings:
    overrides: Dict[str, Any] = {}
    if state:
        overrides["storage"] = {"backend": "file", "path": str(state)}
    try:
        return load_config(config_path=config, **overrides)
    except HeadlessRecorderError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def _read_triggers(path: Path) -> List[Dict[str, Any]]:
    """Read a JSON array or JSON-lines file of trigger records."""
    text = path.read_text(encoding="utf-8").strip()
    if not text:
        return []
    if text.startswith("["):
        records = json.loads(text)
    else:
        records = [json.loads(line) for line in text.splitlines() if line.strip()]
    for i, record in enumerate(records, 1):
        if not isinstance(record, dict) or record.get("channel") not in CHANNELS:
            raise ValueError(f"Record {i}: 'channel' must be one of {', '.join(CHANNELS)}")
    return records


def _state_table(state: SessionState) -> Table:
    table = Table(title="Session State", show_header=True, header_style="bold cyan")
    table.add_column("Key")
    table.add_column("Value")
    table.add_row("isRecording", str(state.is_recording))
    table.add_row("isPaused", str(state.is_paused))
    table.add_row("badgeState", repr(state.badge_state))
    table.add_row("hasGoto", str(state.has_goto))
    table.add_row("hasViewPort", str(state.has_viewport))
    table.add_row("recording", f"{len(state.recording)} event(s)")
    return table


def _events_table(state: SessionState) -> Table:
    table = Table(title="Recorded Events", show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right")
    table.add_column("Action")
    table.add_column("Selector")
    table.add_column("Value")
    table.add_column("Frame")
    for i, event in enumerate(state.recording, 1):
        value = event.get("value", event.get("href", ""))
        table.add_row(
            str(i),
            str(event.get("action", "")),
            escape(str(event.get("selector", ""))),
            escape(json.dumps(value) if isinstance(value, (dict, list)) else str(value)),
            str(event.get("frameId")),
        )
    return table


async def _replay(records: List[Dict[str, Any]], settings: Settings, store: StateStore, url: str) -> int:
    browser = InMemoryBrowser()
    browser.open_tab(url)
    failures = 0

    async with BackgroundService.from_settings(settings, browser, store=store) as service:
        for record in records:
            channel = record["channel"]
            if channel == "runtime":
                future = service.on_runtime_message(record.get("message", {}), record.get("sender"))
            elif channel == "popup":
                future = service.on_popup_message(record.get("message", {}))
            elif channel == "navigation":
                details = record.get("details", {})
                if details.get("url") and details.get("frameId") == 0:
                    browser.navigate(details["url"])
                future = service.on_navigation_completed(details)
            else:
                future = service.on_before_navigate(record.get("details"))

            result = await future
            if not result.ok:
                failures += 1
                console.print(f"[red]✗ {result.trigger}: {result.error}[/red]")

        state = await service.controller.get_state()

    console.print(_state_table(state))
    if state.recording:
        console.print(_events_table(state))

    if browser.sent:
        table = Table(title="Outbound Tab Messages", show_header=True, header_style="bold cyan")
        table.add_column("Tab", justify="right")
        table.add_column("Action")
        table.add_column("Value")
        for tab_id, message in browser.sent:
            value = message.get("value", "")
            shown = json.dumps(value) if isinstance(value, dict) else str(value)
            table.add_row(str(tab_id), message["action"], escape(shown if len(shown) < 60 else shown[:57] + "..."))
        console.print(table)

    return failures


@app.command()
def replay(
    file_path: Path = typer.Argument(..., help="JSON array or JSON-lines file of trigger records"),
    url: str = typer.Option("about:blank", "--url", "-u", help="URL of the simulated active tab"),
    memory: bool = typer.Option(False, "--memory", "-m", help="Use a throwaway in-memory state store"),
    state: Optional[Path] = typer.Option(None, "--state", "-s", help="State file (default: from config)"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose output"),
):
    """
    Replay a log of inbound triggers through the background coordinator.

    Each record is {"channel": ..., "message"|"details": ..., "sender"?: ...}
    where channel is runtime, popup, navigation or before_navigate.

    Examples:
        headless-recorder replay triggers.jsonl --memory
        headless-recorder replay session.json --url https://example.com
    """
    settings = _settings(config, state)
    setup_logging_from_settings(settings.logging, verbose)

    if not file_path.exists():
        console.print(f"[red]Error: File not found: {file_path}[/red]")
        raise typer.Exit(1)

    try:
        records = _read_triggers(file_path)
    except ValueError as e:
        console.print(f"[red]Error: Invalid trigger file: {e}[/red]")
        raise typer.Exit(1)

    console.print(Panel.fit(
        f"[bold blue]🎬 Headless Recorder[/bold blue]\n"
        f"[dim]Triggers:[/dim] {len(records)}\n"
        f"[dim]Tab URL:[/dim] {url}\n"
        f"[dim]Store:[/dim] {'memory' if memory else settings.storage.path}",
        border_style="blue",
    ))

    store = MemoryStateStore() if memory else create_state_store(settings.storage)
    try:
        failures = asyncio.run(_replay(records, settings, store, url))
    except HeadlessRecorderError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if failures:
        raise typer.Exit(1)


@app.command("state")
def show_state(
    state: Optional[Path] = typer.Option(None, "--state", "-s", help="State file (default: from config)"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
):
    """Show the persisted recording session."""
    settings = _settings(config, state)

    async def _load() -> SessionState:
        return await SessionRepository(create_state_store(settings.storage)).load()

    try:
        session = asyncio.run(_load())
    except HeadlessRecorderError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(_state_table(session))
    if session.recording:
        console.print(_events_table(session))


@app.command()
def code(
    flavor: Optional[str] = typer.Option(None, "--flavor", "-f", help="puppeteer or playwright (default: from options)"),
    state: Optional[Path] = typer.Option(None, "--state", "-s", help="State file (default: from config)"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
):
    """Print generated code for the persisted recording."""
    if flavor not in (None, "puppeteer", "playwright"):
        console.print(f"[red]Error: Unknown flavor: {flavor}[/red]")
        raise typer.Exit(1)

    settings = _settings(config, state)

    async def _generate() -> str:
        store = create_state_store(settings.storage)
        stored = await store.get(OPTIONS_KEY)
        options = settings.code.merged_with((stored.get(OPTIONS_KEY) or {}).get("code"))
        session = await SessionRepository(store).load()
        generated = CodeGenerator(options).generate(session.recording)
        if flavor is None:
            return generated.select(options.show_playwright_first)
        return getattr(generated, flavor)

    try:
        script = asyncio.run(_generate())
    except HeadlessRecorderError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    print(script, end="")


@app.command()
def reset(
    state: Optional[Path] = typer.Option(None, "--state", "-s", help="State file (default: from config)"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file"),
):
    """Purge the persisted recording session."""
    settings = _settings(config, state)

    try:
        asyncio.run(SessionRepository(create_state_store(settings.storage)).erase())
    except HeadlessRecorderError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print("[green]✓ Session state cleared[/green]")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
