"""Codex Sync - reconcile a local directory with a Spark Codex."""

from .api import SparkClient
from .config import SyncConfig, SyncConfigError
from .exceptions import (
    SparkAPIError,
    SparkAuthenticationError,
    SparkConfigError,
    SparkFileNotFoundError,
    SparkInvalidResponseError,
    SparkNetworkError,
    SparkNotFoundError,
    SparkPermissionError,
    SparkRateLimitError,
    SparkUploadError,
)
from .models import LocalRecord, RemoteInventory, RemoteRecord, SyncResult

__all__ = [
    "SparkClient",
    "SyncConfig",
    "SyncConfigError",
    "SparkAPIError",
    "SparkAuthenticationError",
    "SparkConfigError",
    "SparkFileNotFoundError",
    "SparkInvalidResponseError",
    "SparkNetworkError",
    "SparkNotFoundError",
    "SparkPermissionError",
    "SparkRateLimitError",
    "SparkUploadError",
    "LocalRecord",
    "RemoteInventory",
    "RemoteRecord",
    "SyncResult",
]
