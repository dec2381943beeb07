"""Exceptions raised by the Spark Codex API client."""


class SparkAPIError(Exception):
    """Base exception for all Spark API errors."""


class SparkConfigError(SparkAPIError):
    """Raised when the client is missing required configuration."""


class SparkAuthenticationError(SparkAPIError):
    """Raised when the API key is invalid or rejected."""


class SparkPermissionError(SparkAPIError):
    """Raised when the API key lacks access to a resource."""


class SparkNotFoundError(SparkAPIError):
    """Raised when a resource (content item, codex) does not exist."""


class SparkRateLimitError(SparkAPIError):
    """Raised when the API rate limit is exceeded."""


class SparkNetworkError(SparkAPIError):
    """Raised on transport failures (DNS, connection reset, timeout)."""


class SparkInvalidResponseError(SparkAPIError):
    """Raised when the server returns a body that cannot be interpreted."""


class SparkUploadError(SparkAPIError):
    """Raised when uploading a file to the Codex fails."""


class SparkFileNotFoundError(SparkAPIError):
    """Raised when a local file selected for upload no longer exists."""

    def __init__(self, file_path: str):
        self.file_path = file_path
        super().__init__(f"File not found: {file_path}")
