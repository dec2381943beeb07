"""Directory scanning utilities for sync operations."""

import logging
import subprocess
from pathlib import Path
from typing import Iterable, Optional

from ..config import SyncConfigError
from ..models import LocalRecord
from ..utils import format_mtime

logger = logging.getLogger(__name__)


class GitTimestampResolver:
    """Looks up the last commit date of a file.

    Runs ``git log -1 --format=%cI -- <file>`` from the file's directory, so
    the file may live in any repository. If the ``git`` executable is not
    available the resolver disables itself after the first attempt.
    """

    def __init__(self, enabled: bool = True, timeout: float = 30.0):
        self.enabled = enabled
        self.timeout = timeout

    def resolve(self, file_path: Path) -> Optional[str]:
        """Return the ISO-8601 committer date for a file.

        Args:
            file_path: File to look up

        Returns:
            Strict ISO date of the most recent commit touching the file, or
            None if git is unavailable or the file has no history
        """
        if not self.enabled:
            return None

        try:
            result = subprocess.run(
                ["git", "log", "-1", "--format=%cI", "--", file_path.name],
                cwd=str(file_path.parent),
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            logger.debug("git executable not found, using file mtimes")
            self.enabled = False
            return None
        except subprocess.SubprocessError as e:
            logger.debug("git log failed for %s: %s", file_path, e)
            return None

        if result.returncode != 0:
            # Not inside a repository
            return None

        return result.stdout.strip() or None


class DirectoryScanner:
    """Scans a directory for files with allowed extensions.

    Examples:
        >>> scanner = DirectoryScanner(["md", "pdf"])
        >>> records = scanner.scan(Path("/docs"))
        >>> # One LocalRecord per *.md / *.pdf file, keyed by basename
    """

    def __init__(
        self,
        extensions: Iterable[str],
        timestamp_resolver: Optional[GitTimestampResolver] = None,
    ):
        """Initialize directory scanner.

        Args:
            extensions: Allowed extensions without leading dot (case sensitive)
            timestamp_resolver: Version-control timestamp lookup; defaults to
                a git resolver
        """
        self.suffixes = tuple(f".{ext}" for ext in extensions)
        self.timestamp_resolver = timestamp_resolver or GitTimestampResolver()

    def matches(self, name: str) -> bool:
        """Check whether a filename ends with one of the allowed extensions."""
        return bool(self.suffixes) and name.endswith(self.suffixes)

    def resolve_timestamp(self, file_path: Path) -> str:
        """Resolve the authoritative modification time of a file.

        The last commit date wins when the file has git history; otherwise
        the filesystem mtime is used, rendered in UTC.
        """
        git_date = self.timestamp_resolver.resolve(file_path)
        if git_date:
            logger.debug("Timestamp for %s from git: %s", file_path, git_date)
            return git_date

        mtime = format_mtime(file_path.stat().st_mtime)
        logger.debug("Timestamp for %s from mtime: %s", file_path, mtime)
        return mtime

    def iter_files(self, directory: Path) -> list[Path]:
        """Recursively list matching regular files in walk order.

        Symlinks are not followed. Entries are visited in name order.
        Directories that cannot be read are skipped.
        """
        files: list[Path] = []

        try:
            entries = sorted(directory.iterdir(), key=lambda p: p.name)
        except PermissionError:
            logger.warning("Permission denied: %s", directory)
            return files

        for item in entries:
            if item.is_symlink():
                continue
            if item.is_dir():
                files.extend(self.iter_files(item))
            elif item.is_file() and self.matches(item.name):
                files.append(item)

        return files

    def scan(self, directory: Path) -> list[LocalRecord]:
        """Build the local inventory for a directory.

        Two files sharing a basename map to the same identifier; the one
        visited later wins and the collision is logged.

        Args:
            directory: Root directory to scan

        Returns:
            One LocalRecord per distinct identifier

        Raises:
            SyncConfigError: If the directory does not exist
        """
        if not directory.is_dir():
            raise SyncConfigError(f"Directory does not exist: {directory}")

        records: dict[str, LocalRecord] = {}

        for file_path in self.iter_files(directory):
            try:
                modified_at = self.resolve_timestamp(file_path)
            except OSError as e:
                logger.warning("Skipping unreadable file %s: %s", file_path, e)
                continue

            identifier = file_path.name
            previous = records.get(identifier)
            if previous is not None:
                logger.warning(
                    "Duplicate filename %s: %s replaces %s",
                    identifier,
                    file_path,
                    previous.path,
                )

            records[identifier] = LocalRecord(
                identifier=identifier, path=file_path, modified_at=modified_at
            )

        return list(records.values())
