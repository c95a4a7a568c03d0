"""Display and terminal output utilities."""

from .console import Console
from .tables import TableDisplay
from .live import LiveDisplay

__all__ = ["Console", "TableDisplay", "LiveDisplay"]
