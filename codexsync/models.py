"""Data models for Codex inventories and sync results."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional


@dataclass(frozen=True)
class RemoteRecord:
    """A content item listed in the Codex."""

    content_id: str
    """Remote content identifier (e.g. ``dc_<uuid>``)"""

    title: str
    """Filename as stored remotely; the identity key"""

    modified_at: Optional[str] = None
    """Last modification timestamp as reported by the API"""

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "RemoteRecord":
        """Create a RemoteRecord from one item of the listing response."""
        modified_at = data.get("modified_at")
        return cls(
            content_id=str(data["id"]),
            title=str(data["title"]),
            modified_at=str(modified_at) if modified_at else None,
        )


@dataclass(frozen=True)
class LocalRecord:
    """A local file selected for sync."""

    identifier: str
    """Basename of the file; the identity key"""

    path: Path
    """Path to the file"""

    modified_at: str
    """Authoritative modification time (ISO-8601), resolved at scan time"""


@dataclass
class RemoteInventory:
    """Validated remote listing plus counts of dropped entries."""

    records: list[RemoteRecord] = field(default_factory=list)
    malformed_count: int = 0
    corrupted_count: int = 0

    def __len__(self) -> int:
        return len(self.records)


@dataclass
class SyncResult:
    """Outcome of a sync run."""

    files_added: int = 0
    files_updated: int = 0
    files_deleted: int = 0
    files_unchanged: int = 0
    errors: int = 0
    dry_run: bool = False

    @property
    def succeeded(self) -> bool:
        """True when no remote mutation failed."""
        return self.errors == 0

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1

    def as_outputs(self) -> dict[str, int]:
        """Counts exposed to the caller (e.g. as GitHub Actions outputs)."""
        return {
            "files_added": self.files_added,
            "files_updated": self.files_updated,
            "files_deleted": self.files_deleted,
            "files_unchanged": self.files_unchanged,
        }
