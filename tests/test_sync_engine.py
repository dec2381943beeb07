"""Tests for the sync engine."""

import os
import threading
from pathlib import Path
from unittest.mock import Mock, call

import pytest

from codexsync.api import SparkClient
from codexsync.config import SyncConfig, SyncConfigError
from codexsync.exceptions import SparkAPIError, SparkNetworkError
from codexsync.output import OutputFormatter
from codexsync.sync import SyncEngine
from codexsync.sync.comparator import DiffResult, ToAdd, ToDelete, ToUpdate, Unchanged


def add(name):
    return ToAdd(identifier=name, path=Path(f"/docs/{name}"), local_modified_at="")


def update(name, remote_id):
    return ToUpdate(
        identifier=name,
        path=Path(f"/docs/{name}"),
        remote_id=remote_id,
        local_modified_at="2025-01-02T00:00:00Z",
        remote_modified_at="2025-01-01T00:00:00Z",
    )


def delete(name, remote_id):
    return ToDelete(identifier=name, remote_id=remote_id)


def unchanged(name, remote_id):
    return Unchanged(identifier=name, path=Path(f"/docs/{name}"), remote_id=remote_id)


class TestSyncEngine:
    """Test SyncEngine.execute."""

    @pytest.fixture
    def mock_client(self):
        """Create a mock Spark client."""
        return Mock(spec=SparkClient)

    @pytest.fixture
    def mock_output(self):
        """Create a mock output formatter."""
        output = Mock(spec=OutputFormatter)
        output.quiet = True
        return output

    @pytest.fixture
    def sync_engine(self, mock_client, mock_output):
        return SyncEngine(mock_client, mock_output)

    @pytest.fixture
    def full_diff(self):
        return DiffResult(
            to_add=[add("new.md")],
            to_update=[update("changed.md", "r1")],
            to_delete=[delete("gone.md", "r2")],
            unchanged=[unchanged("same.md", "r3")],
        )

    def test_create_sync_engine(self, mock_client, mock_output):
        engine = SyncEngine(mock_client, mock_output)
        assert engine.client == mock_client
        assert engine.output == mock_output
        assert engine.reporter.output == mock_output
        assert engine.max_workers == 1

    def test_dry_run_makes_no_calls(self, sync_engine, mock_client, full_diff):
        """Dry run returns zero counts without touching the codex."""
        result = sync_engine.execute(full_diff, "codex-1", dry_run=True)

        assert mock_client.method_calls == []
        assert result.as_outputs() == {
            "files_added": 0,
            "files_updated": 0,
            "files_deleted": 0,
            "files_unchanged": 0,
        }
        assert result.dry_run is True
        assert result.exit_code == 0

    def test_phase_order(self, sync_engine, mock_client, full_diff):
        """Deletes run first, then updates (delete + upload), then adds."""
        result = sync_engine.execute(full_diff, "codex-1")

        assert mock_client.method_calls == [
            call.delete_content("r2"),
            call.delete_content("r1"),
            call.upload_content(file_path=Path("/docs/changed.md"), codex_id="codex-1"),
            call.upload_content(file_path=Path("/docs/new.md"), codex_id="codex-1"),
        ]
        assert result.as_outputs() == {
            "files_added": 1,
            "files_updated": 1,
            "files_deleted": 1,
            "files_unchanged": 1,
        }
        assert result.succeeded

    def test_delete_disabled(self, sync_engine, mock_client, full_diff):
        """With delete_removed=False remote-only items are left alone."""
        result = sync_engine.execute(full_diff, "codex-1", delete_removed=False)

        deleted_ids = [c.args[0] for c in mock_client.delete_content.call_args_list]
        assert deleted_ids == ["r1"]  # only the update's delete half
        assert result.files_deleted == 0
        assert result.errors == 0

    def test_failure_does_not_abort_phase(self, sync_engine, mock_client):
        """If entry 2 of 5 fails, entries 3-5 are still attempted."""
        mock_client.upload_content.side_effect = [
            None,
            SparkAPIError("boom"),
            None,
            None,
            None,
        ]
        diff = DiffResult(to_add=[add(f"f{n}.md") for n in range(5)])

        result = sync_engine.execute(diff, "codex-1")

        assert mock_client.upload_content.call_count == 5
        assert result.files_added == 4
        assert result.errors == 1
        assert not result.succeeded
        assert result.exit_code == 1

    def test_failed_delete_continues_with_other_phases(
        self, sync_engine, mock_client, full_diff
    ):
        mock_client.delete_content.side_effect = [SparkNetworkError("down"), None]

        result = sync_engine.execute(full_diff, "codex-1")

        assert result.files_deleted == 0
        assert result.files_updated == 1
        assert result.files_added == 1
        assert result.errors == 1

    def test_update_delete_half_failure_is_warning(
        self, sync_engine, mock_client, mock_output
    ):
        """An update whose delete fails but upload succeeds counts as updated."""
        mock_client.delete_content.side_effect = SparkAPIError("not found")
        diff = DiffResult(to_update=[update("a.md", "r1")])

        result = sync_engine.execute(diff, "codex-1")

        mock_client.upload_content.assert_called_once()
        assert result.files_updated == 1
        assert result.errors == 0
        mock_output.warning.assert_called_once()
        mock_output.error.assert_not_called()

    def test_update_upload_failure_is_error(self, sync_engine, mock_client):
        mock_client.upload_content.side_effect = SparkAPIError("status 500")
        diff = DiffResult(to_update=[update("a.md", "r1")])

        result = sync_engine.execute(diff, "codex-1")

        assert result.files_updated == 0
        assert result.errors == 1

    def test_os_error_counts_as_item_failure(self, sync_engine, mock_client):
        mock_client.upload_content.side_effect = [PermissionError("denied"), None]
        diff = DiffResult(to_add=[add("a.md"), add("b.md")])

        result = sync_engine.execute(diff, "codex-1")

        assert result.files_added == 1
        assert result.errors == 1

    def test_unexpected_error_propagates(self, sync_engine, mock_client):
        mock_client.upload_content.side_effect = RuntimeError("bug")
        diff = DiffResult(to_add=[add("a.md")])

        with pytest.raises(RuntimeError):
            sync_engine.execute(diff, "codex-1")

    def test_parallel_execution_counts(self, mock_client, mock_output):
        """Per-phase parallel execution aggregates counts without races."""
        threads = set()

        def upload(file_path, codex_id):
            threads.add(threading.get_ident())
            if file_path.name.startswith("bad"):
                raise SparkAPIError("rejected")

        mock_client.upload_content.side_effect = upload
        diff = DiffResult(
            to_add=[add(f"ok{n}.md") for n in range(20)]
            + [add(f"bad{n}.md") for n in range(5)]
        )

        engine = SyncEngine(mock_client, mock_output, max_workers=4)
        result = engine.execute(diff, "codex-1")

        assert mock_client.upload_content.call_count == 25
        assert result.files_added == 20
        assert result.errors == 5
        assert threading.get_ident() not in threads


class TestSyncRun:
    """Tests for the full fetch/scan/diff/execute run."""

    @pytest.fixture
    def mock_output(self):
        output = Mock(spec=OutputFormatter)
        output.quiet = True
        return output

    def _config(self, directory, **kwargs):
        return SyncConfig(
            spark_api_key="key",
            codex_id="codex-1",
            directory=directory,
            use_git=False,
            **kwargs,
        )

    def test_missing_directory_fails_before_network(self, tmp_path, mock_output):
        client = Mock(spec=SparkClient)
        engine = SyncEngine(client, mock_output)

        with pytest.raises(SyncConfigError):
            engine.sync(self._config(tmp_path / "missing"))
        client.list_content.assert_not_called()

    def test_listing_failure_is_fatal(self, tmp_path, mock_output):
        client = Mock(spec=SparkClient)
        client.list_content.side_effect = SparkAPIError("status 500")
        engine = SyncEngine(client, mock_output)

        with pytest.raises(SparkAPIError):
            engine.sync(self._config(tmp_path))
        client.upload_content.assert_not_called()
        client.delete_content.assert_not_called()

    def test_end_to_end(self, tmp_path, mock_output):
        (tmp_path / "a.md").write_text("a")
        (tmp_path / "b.md").write_text("b")
        (tmp_path / "skip.docx").write_text("x")
        os.utime(tmp_path / "a.md", (100, 100))
        os.utime(tmp_path / "b.md", (50, 50))

        client = Mock(spec=SparkClient)
        client.list_content.return_value = {
            "data": [
                {"id": "r1", "title": "a.md", "modified_at": "1970-01-01T00:03:20Z"},
                {"id": "r2", "title": "c.md", "modified_at": "1970-01-01T00:00:10Z"},
            ],
            "total_record": 2,
        }
        engine = SyncEngine(client, mock_output)

        result = engine.sync(self._config(tmp_path))

        client.delete_content.assert_called_once_with("r2")
        client.upload_content.assert_called_once_with(
            file_path=tmp_path / "b.md", codex_id="codex-1"
        )
        assert result.as_outputs() == {
            "files_added": 1,
            "files_updated": 0,
            "files_deleted": 1,
            "files_unchanged": 1,
        }

    def test_end_to_end_dry_run(self, tmp_path, mock_output):
        (tmp_path / "a.md").write_text("a")
        client = Mock(spec=SparkClient)
        client.list_content.return_value = {
            "data": [{"id": "r2", "title": "c.md", "modified_at": None}],
            "total_record": 1,
        }
        engine = SyncEngine(client, mock_output)

        result = engine.sync(self._config(tmp_path, dry_run=True))

        client.delete_content.assert_not_called()
        client.upload_content.assert_not_called()
        assert result.exit_code == 0
