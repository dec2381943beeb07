"""Configuration for Codex sync runs."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from .utils import DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT

DEFAULT_API_BASE_URL = "https://api.spark.my.alaispark.app"
DEFAULT_FILE_EXTENSIONS = "pdf,txt,md,mdx,png,jpg,jpeg,webp,gif,mp3,mp4"

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off", ""}


class SyncConfigError(Exception):
    """Raised when sync configuration is invalid or incomplete."""


def parse_extensions(value: Union[str, list[str], tuple[str, ...]]) -> list[str]:
    """Parse a comma-separated extension list.

    Whitespace around each entry is trimmed, empty entries are dropped and a
    leading dot is tolerated. Case is preserved, matching is case sensitive.

    Args:
        value: Comma-separated string or an already split sequence

    Returns:
        List of extensions without leading dots, in the given order

    Examples:
        >>> parse_extensions("pdf, md ,,.txt")
        ['pdf', 'md', 'txt']
    """
    parts = value.split(",") if isinstance(value, str) else list(value)
    extensions: list[str] = []
    for part in parts:
        ext = part.strip().lstrip(".")
        if ext and ext not in extensions:
            extensions.append(ext)
    return extensions


def parse_bool(value: Union[str, bool, None], default: bool = False) -> bool:
    """Parse a boolean option as given by environment or workflow inputs.

    Examples:
        >>> parse_bool("TRUE")
        True
        >>> parse_bool(None, default=True)
        True
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise SyncConfigError(f"Invalid boolean value: {value!r}")


@dataclass
class SyncConfig:
    """Settings for a single sync run."""

    spark_api_key: str
    codex_id: str
    directory: Path
    api_base_url: str = DEFAULT_API_BASE_URL
    file_extensions: list[str] = field(
        default_factory=lambda: parse_extensions(DEFAULT_FILE_EXTENSIONS)
    )
    dry_run: bool = False
    delete_removed: bool = True
    max_workers: int = 1
    max_retries: int = DEFAULT_MAX_RETRIES
    timeout: float = DEFAULT_TIMEOUT
    use_git: bool = True

    def __post_init__(self) -> None:
        self.directory = Path(self.directory)
        if isinstance(self.file_extensions, str):
            self.file_extensions = parse_extensions(self.file_extensions)
        self.api_base_url = self.api_base_url.rstrip("/")

    def validate(self) -> None:
        """Check the settings that do not touch the filesystem.

        Raises:
            SyncConfigError: If a required value is missing or out of range
        """
        if not self.spark_api_key:
            raise SyncConfigError("spark_api_key is required")
        if not self.codex_id:
            raise SyncConfigError("codex_id is required")
        if not self.api_base_url:
            raise SyncConfigError("api_base_url must not be empty")
        if not self.file_extensions:
            raise SyncConfigError("file_extensions must list at least one extension")
        if self.max_workers < 1:
            raise SyncConfigError("max_workers must be at least 1")
        if self.max_retries < 0:
            raise SyncConfigError("max_retries must not be negative")
        if self.timeout <= 0:
            raise SyncConfigError("timeout must be positive")

    def check_directory(self) -> None:
        """Ensure the sync directory exists.

        Raises:
            SyncConfigError: If the directory is missing or not a directory
        """
        if not self.directory.exists():
            raise SyncConfigError(f"Directory does not exist: {self.directory}")
        if not self.directory.is_dir():
            raise SyncConfigError(f"Path is not a directory: {self.directory}")

    @classmethod
    def from_options(
        cls,
        spark_api_key: Optional[str],
        codex_id: Optional[str],
        directory: Union[str, Path, None],
        api_base_url: Optional[str] = None,
        file_extensions: Optional[str] = None,
        dry_run: Union[str, bool, None] = None,
        delete_removed: Union[str, bool, None] = None,
        **kwargs: object,
    ) -> "SyncConfig":
        """Build a validated config from loosely typed named options.

        Raises:
            SyncConfigError: If a required option is missing or invalid
        """
        if directory is None or str(directory) == "":
            raise SyncConfigError("directory is required")
        config = cls(
            spark_api_key=spark_api_key or "",
            codex_id=codex_id or "",
            directory=Path(directory),
            api_base_url=api_base_url or DEFAULT_API_BASE_URL,
            file_extensions=parse_extensions(
                file_extensions or DEFAULT_FILE_EXTENSIONS
            ),
            dry_run=parse_bool(dry_run, default=False),
            delete_removed=parse_bool(delete_removed, default=True),
            **kwargs,  # type: ignore[arg-type]
        )
        config.validate()
        return config
