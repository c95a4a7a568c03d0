"""OBD Reader CLI application."""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.logging import RichHandler

from .config import get_settings
from .connection.engine import SessionEngine
from .connection.simulator import SimulatedTransport
from .display.console import console as display_console
from .display.live import LiveDisplay
from .display.tables import TableDisplay
from .errors import ObdReaderError
from .storage.snapshots import SnapshotStore

app = typer.Typer(
    name="obd-reader",
    help="ELM327 reader - live data and stored trouble codes",
    no_args_is_help=True,
)

_table_display = TableDisplay(display_console.rich_console)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log protocol traffic"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level"),
):
    """Configure logging for all commands."""
    level = "DEBUG" if verbose else (log_level or get_settings().log_level)
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=display_console.rich_console, show_path=False)],
        force=True,
    )


def build_engine(simulate: bool) -> SessionEngine:
    """Create an engine for a real port or the built-in simulator."""
    if simulate:
        return SessionEngine(transport_factory=lambda _ref: SimulatedTransport())
    return SessionEngine()


def open_session(port: Optional[str], simulate: bool) -> SessionEngine:
    """Connect or exit with an error."""
    engine = build_engine(simulate)
    device = "simulator" if simulate else (port or get_settings().port)

    display_console.info(f"Connecting to {device}...")
    result = engine.connect(device)
    if not result.success:
        display_console.error(f"Connection failed: {result.error}")
        raise typer.Exit(1)

    display_console.print_connection_status(engine.state, f"{device} ({result.adapter_version or 'unknown adapter'})")
    return engine


@app.command()
def read(
    port: Optional[str] = typer.Option(None, "--port", "-p", help="Serial device (default from settings)"),
    simulate: bool = typer.Option(False, "--simulate", help="Use the built-in adapter simulator"),
    save: bool = typer.Option(False, "--save/--no-save", help="Save the snapshot as JSON"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Snapshot file name"),
    as_json: bool = typer.Option(False, "--json", help="Print the snapshot as JSON"),
):
    """Read live data and stored trouble codes once."""
    with open_session(port, simulate) as engine:
        try:
            snapshot = engine.read_data()
        except ObdReaderError as e:
            display_console.error(f"Read failed: {e}")
            raise typer.Exit(1)

        if as_json:
            display_console.rich_console.print_json(json.dumps(snapshot.to_dict_for_export()))
        else:
            _table_display.show_snapshot(snapshot)

        if save:
            settings = get_settings()
            store = SnapshotStore(settings.data_dir, settings.snapshot_filename)
            path = store.save(snapshot, filename=output)
            display_console.success(f"Saved to {path}")


@app.command()
def monitor(
    port: Optional[str] = typer.Option(None, "--port", "-p", help="Serial device (default from settings)"),
    simulate: bool = typer.Option(False, "--simulate", help="Use the built-in adapter simulator"),
    interval: int = typer.Option(1000, "--interval", "-i", help="Delay between read cycles in ms"),
    count: Optional[int] = typer.Option(None, "--count", "-n", help="Stop after N cycles"),
):
    """Live monitoring dashboard."""
    with open_session(port, simulate) as engine:
        live_display = LiveDisplay(display_console.rich_console)
        live_display.start_monitoring(
            read_cycle=engine.read_data,
            refresh_rate=interval / 1000,
            connection_info=engine.device_ref,
            max_cycles=count,
            error_types=(ObdReaderError,),
        )

    display_console.newline()
    display_console.info(f"Monitoring stopped after {live_display.sample_count} cycles")
    if live_display.error_count:
        display_console.warning(f"{live_display.error_count} read cycles failed")


@app.command()
def raw(
    command: str = typer.Argument(..., help="Command to send, e.g. ATI or 0100"),
    port: Optional[str] = typer.Option(None, "--port", "-p", help="Serial device (default from settings)"),
    simulate: bool = typer.Option(False, "--simulate", help="Use the built-in adapter simulator"),
):
    """Send one raw command and print the normalized response."""
    with open_session(port, simulate) as engine:
        try:
            response = engine.send_raw(command)
        except (ObdReaderError, ValueError) as e:
            display_console.error(f"{command}: {e}")
            raise typer.Exit(1)

        display_console.print(f"[pid.name]{response.command}[/pid.name] -> [pid.value]{response.text or '(empty)'}[/pid.value]")
        display_console.print(f"[muted]{response.elapsed * 1000:.0f} ms[/muted]")


@app.command()
def show(
    file: Optional[Path] = typer.Argument(None, help="Snapshot file (default: last saved)"),
):
    """Show a saved snapshot."""
    settings = get_settings()
    store = SnapshotStore(settings.data_dir, settings.snapshot_filename)
    path = file or store.default_path

    try:
        snapshot = store.load(path)
    except FileNotFoundError:
        display_console.error(f"No snapshot at {path}")
        raise typer.Exit(1)
    except (ValueError, KeyError) as e:
        display_console.error(f"Invalid snapshot {path}: {e}")
        raise typer.Exit(1)

    display_console.header("Saved Snapshot", str(path))
    _table_display.show_snapshot(snapshot)


if __name__ == "__main__":
    app()
