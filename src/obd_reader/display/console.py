"""Console output utilities using Rich."""

from typing import Optional

from rich.console import Console as RichConsole
from rich.theme import Theme

from ..connection.engine import ConnectionState

OBD_THEME = Theme({
    "info": "cyan",
    "success": "green",
    "warning": "yellow",
    "error": "red bold",
    "muted": "dim",
    "pid.name": "cyan bold",
    "pid.value": "green",
    "pid.unit": "dim",
    "dtc.code": "yellow bold",
    "status.connected": "green bold",
    "status.disconnected": "red",
    "status.connecting": "yellow",
    "status.failed": "red bold reverse",
    "header": "bold blue",
})


class Console:
    """Styled console output for the OBD reader."""

    def __init__(self, rich_console: Optional[RichConsole] = None):
        self._console = rich_console or RichConsole(theme=OBD_THEME)

    @property
    def rich_console(self) -> RichConsole:
        """Get the underlying Rich console."""
        return self._console

    def print(self, *args, **kwargs) -> None:
        """Print to console."""
        self._console.print(*args, **kwargs)

    def info(self, message: str, prefix: str = "INFO") -> None:
        self._console.print(f"[info][{prefix}][/info] {message}")

    def success(self, message: str, prefix: str = "OK") -> None:
        self._console.print(f"[success][{prefix}][/success] {message}")

    def warning(self, message: str, prefix: str = "WARN") -> None:
        self._console.print(f"[warning][{prefix}][/warning] {message}")

    def error(self, message: str, prefix: str = "ERROR") -> None:
        self._console.print(f"[error][{prefix}][/error] {message}")

    def header(self, title: str, subtitle: Optional[str] = None) -> None:
        """Print a section header."""
        self._console.print()
        self._console.print(f"[header]{title}[/header]")
        if subtitle:
            self._console.print(f"[muted]{subtitle}[/muted]")

    def newline(self, count: int = 1) -> None:
        for _ in range(count):
            self._console.print()

    def print_connection_status(self, state: ConnectionState, details: str = "") -> None:
        """Print connection status."""
        style = f"status.{state.value}"
        self._console.print(f"Status: [{style}]{state.value.upper()}[/{style}]")
        if details:
            self._console.print(f"  [muted]{details}[/muted]")


# Global console instance
console = Console()
