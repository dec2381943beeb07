"""Diff computation between the local and remote inventories."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import ClassVar, Iterable, Optional, Union

from ..models import LocalRecord, RemoteRecord
from ..utils import to_epoch


class SyncAction(str, Enum):
    """Actions that can be taken during sync."""

    ADD = "add"
    """Upload a local file the Codex doesn't have"""

    UPDATE = "update"
    """Replace the Codex copy with a newer local file"""

    DELETE = "delete"
    """Remove a Codex item with no local counterpart"""

    UNCHANGED = "unchanged"
    """Nothing to do"""


@dataclass(frozen=True)
class ToAdd:
    action: ClassVar[SyncAction] = SyncAction.ADD

    identifier: str
    path: Path
    local_modified_at: str


@dataclass(frozen=True)
class ToUpdate:
    action: ClassVar[SyncAction] = SyncAction.UPDATE

    identifier: str
    path: Path
    remote_id: str
    local_modified_at: str
    remote_modified_at: Optional[str]


@dataclass(frozen=True)
class ToDelete:
    action: ClassVar[SyncAction] = SyncAction.DELETE

    identifier: str
    remote_id: str


@dataclass(frozen=True)
class Unchanged:
    action: ClassVar[SyncAction] = SyncAction.UNCHANGED

    identifier: str
    path: Path
    remote_id: str


DiffEntry = Union[ToAdd, ToUpdate, ToDelete, Unchanged]


@dataclass
class DiffResult:
    """Partition of every local and remote item into the four actions."""

    to_add: list[ToAdd] = field(default_factory=list)
    to_update: list[ToUpdate] = field(default_factory=list)
    to_delete: list[ToDelete] = field(default_factory=list)
    unchanged: list[Unchanged] = field(default_factory=list)

    @property
    def total(self) -> int:
        return (
            len(self.to_add)
            + len(self.to_update)
            + len(self.to_delete)
            + len(self.unchanged)
        )

    @property
    def entries(self) -> list[DiffEntry]:
        """All entries, in add/update/delete/unchanged order."""
        return [*self.to_add, *self.to_update, *self.to_delete, *self.unchanged]

    def counts(self) -> dict[str, int]:
        """Number of entries per action."""
        return {
            SyncAction.ADD.value: len(self.to_add),
            SyncAction.UPDATE.value: len(self.to_update),
            SyncAction.DELETE.value: len(self.to_delete),
            SyncAction.UNCHANGED.value: len(self.unchanged),
        }


class DiffEngine:
    """Compares local and remote inventories to determine sync actions.

    Records are joined on ``identifier == title``. A local file wins only
    when its epoch timestamp is strictly newer than the remote one; absent
    or unparsable timestamps count as epoch 0.
    When several remote records share a title, the last one is the match
    target; earlier records with a locally present title are left alone.
    """

    def compare(
        self,
        remote_records: Iterable[RemoteRecord],
        local_records: Iterable[LocalRecord],
    ) -> DiffResult:
        """Compute the diff partition.

        Args:
            remote_records: Validated remote inventory
            local_records: Local inventory

        Returns:
            DiffResult covering every local identifier and every remote
            record without a local counterpart
        """
        remote_list = list(remote_records)
        remote_by_title = {record.title: record for record in remote_list}

        result = DiffResult()
        local_identifiers: set[str] = set()

        for local in local_records:
            local_identifiers.add(local.identifier)
            remote = remote_by_title.get(local.identifier)

            if remote is None:
                result.to_add.append(
                    ToAdd(
                        identifier=local.identifier,
                        path=local.path,
                        local_modified_at=local.modified_at,
                    )
                )
            elif self.is_newer(local, remote):
                result.to_update.append(
                    ToUpdate(
                        identifier=local.identifier,
                        path=local.path,
                        remote_id=remote.content_id,
                        local_modified_at=local.modified_at,
                        remote_modified_at=remote.modified_at,
                    )
                )
            else:
                result.unchanged.append(
                    Unchanged(
                        identifier=local.identifier,
                        path=local.path,
                        remote_id=remote.content_id,
                    )
                )

        for remote in remote_list:
            if remote.title not in local_identifiers:
                result.to_delete.append(
                    ToDelete(identifier=remote.title, remote_id=remote.content_id)
                )

        return result

    @staticmethod
    def is_newer(local: LocalRecord, remote: RemoteRecord) -> bool:
        """Check whether the local file is strictly newer than the remote one."""
        return to_epoch(local.modified_at) > to_epoch(remote.modified_at)
