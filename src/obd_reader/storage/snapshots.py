"""JSON snapshot store."""

import json
import logging
from pathlib import Path
from typing import List, Optional

from ..models.session import SessionSnapshot

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Writes session snapshots to JSON files."""

    DEFAULT_DATA_DIR = Path.home() / ".obd-reader"
    DEFAULT_FILENAME = "obd_session.json"

    def __init__(self, data_dir: Optional[Path] = None, filename: Optional[str] = None):
        """
        Initialize snapshot store.

        Args:
            data_dir: Directory to store snapshot files
            filename: Default file name; each save overwrites it
        """
        self._data_dir = Path(data_dir) if data_dir else self.DEFAULT_DATA_DIR
        self._filename = filename or self.DEFAULT_FILENAME

    @property
    def data_dir(self) -> Path:
        """Get data directory path."""
        return self._data_dir

    @property
    def default_path(self) -> Path:
        """Where save() writes when no file name is given."""
        return self._data_dir / self._filename

    def save(self, snapshot: SessionSnapshot, filename: Optional[str] = None) -> Path:
        """
        Write a snapshot.

        Args:
            snapshot: Snapshot to persist
            filename: Override the default file name

        Returns:
            Path to the written file
        """
        self._data_dir.mkdir(parents=True, exist_ok=True)
        filepath = self._data_dir / (filename or self._filename)

        with open(filepath, "w") as f:
            json.dump(snapshot.to_dict_for_export(), f, indent=2)

        logger.info(f"Saved snapshot {snapshot.timestamp} to {filepath}")
        return filepath

    def load(self, filepath: Optional[Path] = None) -> SessionSnapshot:
        """Read a snapshot back from disk."""
        filepath = Path(filepath) if filepath else self.default_path
        with open(filepath, "r") as f:
            data = json.load(f)
        return SessionSnapshot.from_export(data)

    def list_snapshots(self) -> List[Path]:
        """List snapshot files, newest first."""
        if not self._data_dir.exists():
            return []
        files = list(self._data_dir.glob("*.json"))
        files.sort(key=lambda f: f.stat().st_mtime, reverse=True)
        return files
