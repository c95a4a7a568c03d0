"""Snapshot persistence."""

from .snapshots import SnapshotStore

__all__ = ["SnapshotStore"]
