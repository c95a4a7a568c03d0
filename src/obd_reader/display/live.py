"""Live data display for repeated read cycles."""

import time
from datetime import datetime
from typing import Callable, Optional

from rich.console import Console, Group
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from ..models.session import SessionSnapshot
from .tables import TableDisplay


class LiveDisplay:
    """Real-time dashboard display for OBD monitoring."""

    def __init__(self, console: Optional[Console] = None):
        self._console = console or Console()
        self._tables = TableDisplay(self._console)
        self._sample_count = 0
        self._error_count = 0
        self._last_error: Optional[str] = None

    @property
    def sample_count(self) -> int:
        return self._sample_count

    @property
    def error_count(self) -> int:
        return self._error_count

    def create_dashboard(self, snapshot: Optional[SessionSnapshot], connection_info: Optional[str] = None) -> Panel:
        """Create a dashboard panel for the latest snapshot."""
        parts = []
        if snapshot is not None:
            parts.append(self._tables.live_table(snapshot.live, title=""))
            if snapshot.dtcs:
                parts.append(self._tables.dtc_table(snapshot.dtcs, title=""))
            else:
                parts.append(Text("No stored trouble codes", style="green"))
        else:
            parts.append(Text("Waiting for data...", style="dim"))

        now = datetime.now().strftime("%H:%M:%S")
        status_parts = [f"[dim]Updated: {now}[/dim]", f"[dim]Cycles: {self._sample_count}[/dim]"]
        if self._error_count > 0:
            status_parts.append(f"[red]Errors: {self._error_count}[/red]")
        if self._last_error:
            status_parts.append(f"[red]{escape(self._last_error)}[/red]")
        parts.append(Text.from_markup(" | ".join(status_parts)))

        return Panel(
            Group(*parts),
            title=f"[bold cyan]{connection_info or 'Live Monitor'}[/bold cyan]",
            subtitle="[dim]Press Ctrl+C to stop[/dim]",
            border_style="cyan",
        )

    def start_monitoring(
        self,
        read_cycle: Callable[[], SessionSnapshot],
        refresh_rate: float = 1.0,
        connection_info: Optional[str] = None,
        max_cycles: Optional[int] = None,
        error_types: tuple = (Exception,),
    ) -> None:
        """
        Run read cycles and redraw the dashboard until stopped.

        Args:
            read_cycle: Callback performing one read cycle
            refresh_rate: Seconds between cycles
            connection_info: Header text
            max_cycles: Stop after this many cycles (None = until Ctrl+C)
            error_types: Exceptions counted and shown instead of aborting
        """
        self._sample_count = 0
        self._error_count = 0
        self._last_error = None
        snapshot: Optional[SessionSnapshot] = None

        with Live(self.create_dashboard(None, connection_info), console=self._console) as live:
            try:
                while True:
                    try:
                        snapshot = read_cycle()
                        self._sample_count += 1
                        self._last_error = None
                    except error_types as e:
                        self._error_count += 1
                        self._last_error = str(e)

                    live.update(self.create_dashboard(snapshot, connection_info))

                    if max_cycles is not None and self._sample_count + self._error_count >= max_cycles:
                        break
                    time.sleep(refresh_rate)
            except KeyboardInterrupt:
                pass
