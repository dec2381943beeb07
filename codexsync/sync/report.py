"""Rendering of sync plans and results."""

import logging
import os
from pathlib import Path
from typing import Optional, Union

from rich.markup import escape

from ..models import RemoteInventory, SyncResult
from ..output import OutputFormatter
from ..utils import date_part
from .comparator import DiffResult

logger = logging.getLogger(__name__)

RULE = "═" * 60


def write_github_outputs(
    result: SyncResult, path: Union[str, Path, None] = None
) -> bool:
    """Append the result counts to the GitHub Actions output file.

    Args:
        result: Result of the sync run
        path: Output file; defaults to ``$GITHUB_OUTPUT``

    Returns:
        True if the outputs were written, False if no output file is set
    """
    target = path or os.environ.get("GITHUB_OUTPUT")
    if not target:
        return False

    with open(target, "a", encoding="utf-8") as fh:
        for key, value in result.as_outputs().items():
            fh.write(f"{key}={value}\n")

    logger.debug("Wrote sync outputs to %s", target)
    return True


class SyncReporter:
    """Renders inventories, the diff preview and final counts."""

    def __init__(self, output: Optional[OutputFormatter] = None):
        self.output = output or OutputFormatter()

    def _banner(self, title: str) -> None:
        self.output.print("")
        self.output.print(f"[bold]{RULE}[/bold]")
        self.output.print(f"[bold]{title.center(60).rstrip()}[/bold]")
        self.output.print(f"[bold]{RULE}[/bold]")
        self.output.print("")

    def show_header(self, codex_id: str, directory: Path) -> None:
        self.output.print("")
        self.output.print("[bold]🔄 Codex Sync[/bold]")
        self.output.print(f"   Codex ID: {escape(codex_id)}")
        self.output.print(f"   Directory: {escape(str(directory))}")
        self.output.print("")

    def show_remote_inventory(self, inventory: RemoteInventory) -> None:
        self.output.success(f"Found {len(inventory)} valid files in Codex")
        if inventory.malformed_count:
            self.output.warning(
                f"Skipped {inventory.malformed_count} malformed entries "
                "from API response"
            )
        if inventory.corrupted_count:
            self.output.warning(
                f"Skipped {inventory.corrupted_count} corrupted entries "
                "(title was content_id or timestamp)"
            )

    def show_local_inventory(self, count: int) -> None:
        self.output.success(f"Found {count} compatible files locally")

    def show_diff(
        self, diff: DiffResult, delete_removed: bool = True, dry_run: bool = False
    ) -> None:
        """Render the planned changes.

        Args:
            diff: Diff partition to render
            delete_removed: Whether deletions will actually be applied
            dry_run: Whether this run only previews changes
        """
        counts = diff.counts()
        self._banner("Codex Sync Diff")

        if diff.to_add:
            self.output.print(f" [green]+ ADD[/green] ({counts['add']} files)")
            for added in diff.to_add:
                self.output.print(f"   [green]•[/green] {escape(added.identifier)}")
            self.output.print("")

        if diff.to_update:
            self.output.print(
                f" [yellow]↻ UPDATE[/yellow] ({counts['update']} files)"
            )
            for updated in diff.to_update:
                self.output.print(
                    f"   [yellow]•[/yellow] {escape(updated.identifier)}"
                )
                self.output.print(
                    f"     local: {escape(date_part(updated.local_modified_at))} → "
                    f"codex: {escape(date_part(updated.remote_modified_at))}"
                )
            self.output.print("")

        if diff.to_delete:
            if delete_removed:
                self.output.print(
                    f" [red]- DELETE[/red] ({counts['delete']} files)"
                )
            else:
                self.output.print(
                    f" [red]- WOULD DELETE[/red] ({counts['delete']} files, "
                    "skipped - delete_removed=false)"
                )
            for deleted in diff.to_delete:
                self.output.print(f"   [red]•[/red] {escape(deleted.identifier)}")
            self.output.print("")

        if diff.unchanged:
            self.output.print(
                f" [cyan]= UNCHANGED[/cyan] ({counts['unchanged']} files)"
            )
            self.output.print("")

        self.output.print(f"[bold]{RULE}[/bold]")
        self.output.print("")
        self.output.print(
            f"📊 [bold]Summary:[/bold] {diff.total} total | "
            f"[green]+{counts['add']}[/green] | "
            f"[yellow]↻{counts['update']}[/yellow] | "
            f"[red]-{counts['delete']}[/red] | "
            f"[cyan]={counts['unchanged']}[/cyan]"
        )
        self.output.print("")

        if dry_run:
            self.output.print(
                "[yellow]🔍 DRY RUN MODE - No changes will be made[/yellow]"
            )
            self.output.print("")

    def show_results(self, result: SyncResult) -> None:
        """Render the final counts of an executed sync."""
        if result.dry_run:
            self.output.info("Dry run mode - skipping sync")
            return

        self._banner("Sync Complete")
        self.output.print(f"  [green]Added:[/green]   {result.files_added} files")
        self.output.print(
            f"  [yellow]Updated:[/yellow] {result.files_updated} files"
        )
        self.output.print(f"  [red]Deleted:[/red] {result.files_deleted} files")
        if result.errors:
            self.output.print(f"  [red]Errors:[/red]  {result.errors}")
        self.output.print("")
