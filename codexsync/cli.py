"""CLI interface for Codex sync."""

import logging
from pathlib import Path
from typing import Any, Optional

import click
from rich.markup import escape

from .api import SparkClient
from .config import (
    DEFAULT_API_BASE_URL,
    DEFAULT_FILE_EXTENSIONS,
    SyncConfig,
    SyncConfigError,
)
from .exceptions import SparkAPIError
from .output import OutputFormatter
from .sync import SyncEngine, write_github_outputs
from .utils import DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    """Configure logging based on the verbose flag."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("codexsync").setLevel(logging.DEBUG)
        # Request-level chatter from the HTTP stack stays hidden
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)
    else:
        logging.basicConfig(level=logging.WARNING)


@click.command()
@click.option(
    "--api-key",
    "-k",
    "spark_api_key",
    envvar="SPARK_API_KEY",
    help="Spark API key (bearer credential)",
)
@click.option("--codex-id", "-c", envvar="CODEX_ID", help="Codex to sync into")
@click.option(
    "--directory",
    "-d",
    envvar="DIRECTORY",
    type=click.Path(path_type=Path),
    help="Local directory to sync",
)
@click.option(
    "--api-base-url",
    envvar="API_BASE_URL",
    default=DEFAULT_API_BASE_URL,
    show_default=True,
    help="Spark API base URL",
)
@click.option(
    "--file-extensions",
    "-e",
    envvar="FILE_EXTENSIONS",
    default=DEFAULT_FILE_EXTENSIONS,
    show_default=True,
    help="Comma-separated list of file extensions to sync",
)
@click.option(
    "--dry-run/--no-dry-run",
    envvar="DRY_RUN",
    default=False,
    help="Show what would change without touching the Codex",
)
@click.option(
    "--delete-removed/--keep-removed",
    envvar="DELETE_REMOVED",
    default=True,
    help="Delete Codex files that no longer exist locally (default: delete)",
)
@click.option(
    "--workers",
    "-j",
    "max_workers",
    envvar="MAX_WORKERS",
    type=click.IntRange(min=1),
    default=1,
    help="Parallel workers per sync phase (default: 1)",
)
@click.option(
    "--max-retries",
    envvar="MAX_RETRIES",
    type=click.IntRange(min=0),
    default=DEFAULT_MAX_RETRIES,
    show_default=True,
    help="Retries for transient failures of uploads and deletes",
)
@click.option(
    "--timeout",
    envvar="SPARK_TIMEOUT",
    type=float,
    default=DEFAULT_TIMEOUT,
    show_default=True,
    help="Request timeout in seconds",
)
@click.option(
    "--git/--no-git",
    "use_git",
    envvar="USE_GIT_TIMESTAMPS",
    default=True,
    help="Use git commit dates as file timestamps (default: on)",
)
@click.option(
    "--github-output",
    envvar="GITHUB_OUTPUT",
    type=click.Path(dir_okay=False, path_type=Path),
    help="File receiving files_added/updated/deleted/unchanged outputs",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON")
@click.option(
    "--verbose",
    "-v",
    envvar="DEBUG",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="codex-sync")
@click.pass_context
def main(
    ctx: Any,
    spark_api_key: Optional[str],
    codex_id: Optional[str],
    directory: Optional[Path],
    api_base_url: str,
    file_extensions: str,
    dry_run: bool,
    delete_removed: bool,
    max_workers: int,
    max_retries: int,
    timeout: float,
    use_git: bool,
    github_output: Optional[Path],
    quiet: bool,
    json_output: bool,
    verbose: bool,
) -> None:
    """Codex Sync - sync a local directory to a Spark Codex.

    New and changed files are uploaded; files missing locally are deleted
    from the Codex unless --keep-removed is given.
    """
    configure_logging(verbose)
    out = OutputFormatter(json_output=json_output, quiet=quiet)

    try:
        config = SyncConfig.from_options(
            spark_api_key=spark_api_key,
            codex_id=codex_id,
            directory=directory,
            api_base_url=api_base_url,
            file_extensions=file_extensions,
            dry_run=dry_run,
            delete_removed=delete_removed,
            max_workers=max_workers,
            max_retries=max_retries,
            timeout=timeout,
            use_git=use_git,
        )
    except SyncConfigError as e:
        out.error(f"Invalid configuration: {escape(str(e))}")
        ctx.exit(1)

    try:
        with SparkClient(
            api_key=config.spark_api_key,
            api_url=config.api_base_url,
            max_retries=config.max_retries,
            timeout=config.timeout,
        ) as client:
            engine = SyncEngine(client, out, max_workers=config.max_workers)
            result = engine.sync(config)
    except SyncConfigError as e:
        out.error(escape(str(e)))
        ctx.exit(1)
    except SparkAPIError as e:
        out.error(f"Failed to fetch Codex inventory: {escape(str(e))}")
        ctx.exit(1)

    write_github_outputs(result, github_output)

    if json_output:
        out.print_json(
            {**result.as_outputs(), "errors": result.errors, "dry_run": result.dry_run}
        )

    if not result.succeeded:
        logger.debug("Sync finished with %d error(s)", result.errors)
        ctx.exit(1)


if __name__ == "__main__":
    main()
