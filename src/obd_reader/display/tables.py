"""Table display utilities for the OBD reader."""

from typing import Optional, Sequence

from rich.console import Console
from rich.table import Table

from ..models.dtc import DiagnosticCode, DTCCategory
from ..models.live import LiveReading
from ..models.session import SessionSnapshot

CATEGORY_NAMES = {
    DTCCategory.POWERTRAIN: "Powertrain",
    DTCCategory.CHASSIS: "Chassis",
    DTCCategory.BODY: "Body",
    DTCCategory.NETWORK: "Network",
}


class TableDisplay:
    """Create and display formatted tables."""

    def __init__(self, console: Optional[Console] = None):
        self._console = console or Console()

    def live_table(self, live: LiveReading, title: str = "Live Data") -> Table:
        """Create a table of live values."""
        table = Table(title=title, show_header=True, header_style="bold cyan")

        table.add_column("Parameter", style="cyan bold", width=22)
        table.add_column("Value", justify="right", width=10)
        table.add_column("Unit", style="dim", width=6)

        table.add_row("Engine RPM", str(live.rpm), "rpm")
        table.add_row("Vehicle Speed", str(live.speed_kmh), "km/h")
        table.add_row("Coolant Temperature", str(live.coolant_c), "C")
        table.add_row("Battery Voltage", f"{live.battery_v:.1f}", "V")

        return table

    def dtc_table(self, dtcs: Sequence[DiagnosticCode], title: str = "Stored Trouble Codes") -> Table:
        """Create a table of DTCs."""
        table = Table(title=title, show_header=True, header_style="bold cyan")

        table.add_column("#", style="dim", justify="right", width=3)
        table.add_column("Code", style="yellow bold", width=8)
        table.add_column("Category", width=12)
        table.add_column("Type", style="dim")

        for index, dtc in enumerate(dtcs, start=1):
            table.add_row(
                str(index),
                dtc.text,
                CATEGORY_NAMES[dtc.category],
                "Generic" if dtc.is_generic else "Manufacturer",
            )

        return table

    def show_snapshot(self, snapshot: SessionSnapshot) -> None:
        """Print a snapshot as live and DTC tables."""
        self._console.print(f"[dim]Snapshot {snapshot.timestamp}[/dim]")
        self._console.print(self.live_table(snapshot.live))
        if snapshot.dtcs:
            self._console.print(self.dtc_table(snapshot.dtcs))
        else:
            self._console.print("[green]No stored trouble codes[/green]")
