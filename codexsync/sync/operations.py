"""Remote mutations used by the sync engine."""

from pathlib import Path

from ..api import SparkClient


class SyncOperations:
    """Create and delete operations against a single codex."""

    def __init__(self, client: SparkClient, codex_id: str):
        """Initialize sync operations.

        Args:
            client: Spark API client
            codex_id: Codex that receives uploads
        """
        self.client = client
        self.codex_id = codex_id

    def upload(self, path: Path) -> None:
        """Upload a local file as a new content item."""
        self.client.upload_content(file_path=path, codex_id=self.codex_id)

    def delete_remote(self, remote_id: str) -> None:
        """Delete a content item from the codex."""
        self.client.delete_content(remote_id)
