"""Sync engine for codex-sync: inventories, diff and execution."""

from .comparator import (
    DiffEngine,
    DiffEntry,
    DiffResult,
    SyncAction,
    ToAdd,
    ToDelete,
    ToUpdate,
    Unchanged,
)
from .engine import SyncEngine
from .operations import SyncOperations
from .remote import RemoteInventoryFetcher
from .report import SyncReporter, write_github_outputs
from .scanner import DirectoryScanner, GitTimestampResolver

__all__ = [
    "SyncEngine",
    "SyncOperations",
    "SyncReporter",
    "write_github_outputs",
    "RemoteInventoryFetcher",
    "DirectoryScanner",
    "GitTimestampResolver",
    "DiffEngine",
    "DiffEntry",
    "DiffResult",
    "SyncAction",
    "ToAdd",
    "ToUpdate",
    "ToDelete",
    "Unchanged",
]
