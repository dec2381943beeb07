"""API client for the Spark Codex content store."""

from __future__ import annotations

import mimetypes
import random
import time
from pathlib import Path
from typing import Any

import httpx

from .config import DEFAULT_API_BASE_URL
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
from .utils import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY, DEFAULT_TIMEOUT


class SparkClient:
    """Client for interacting with the Spark Codex API."""

    def __init__(
        self,
        api_key: str | None,
        api_url: str | None = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize Spark API client.

        Args:
            api_key: Bearer credential sent with every request
            api_url: API base URL (default: the public Spark API)
            max_retries: Maximum number of retry attempts (default: 3)
            retry_delay: Initial delay between retries in seconds (default: 1.0)
            timeout: Request timeout in seconds (default: 30.0)
        """
        self.api_key = api_key
        self.api_url = (api_url or DEFAULT_API_BASE_URL).rstrip("/")
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout

        if not self.api_key:
            raise SparkConfigError(
                "API key not configured. Please set SPARK_API_KEY environment variable."
            )

        self._client: httpx.Client | None = None

    def __enter__(self) -> SparkClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
            )
        return self._client

    def close(self) -> None:
        """Close the client and release connections."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()
            self._client = None

    def _should_retry(self, exception: Exception, attempt: int) -> bool:
        """Determine if a request should be retried.

        Args:
            exception: The exception that occurred
            attempt: Current attempt number (0-based)

        Returns:
            True if the request should be retried, False otherwise
        """
        if attempt >= self.max_retries:
            return False

        # Transient failures
        if isinstance(exception, (SparkNetworkError, SparkRateLimitError)):
            return True

        if isinstance(exception, httpx.HTTPStatusError):
            return 500 <= exception.response.status_code < 600

        return False

    def _calculate_retry_delay(self, attempt: int) -> float:
        """Calculate delay before next retry using exponential backoff.

        Args:
            attempt: Current attempt number (0-based)

        Returns:
            Delay in seconds
        """
        base_delay = self.retry_delay * (2**attempt)
        # Jitter of +/- 25% of the base delay
        jitter = base_delay * 0.25 * (2 * random.random() - 1)
        return base_delay + jitter

    def _handle_http_error(
        self, e: httpx.HTTPStatusError, attempt: int
    ) -> tuple[SparkAPIError, bool]:
        """Map an HTTP error to a Spark exception and decide on retry.

        Args:
            e: The HTTP error exception
            attempt: Current attempt number

        Returns:
            Tuple of (exception to raise, should_retry)
        """
        status_code = e.response.status_code

        if status_code == 401:
            raise SparkAuthenticationError(
                "Invalid API key or unauthorized access"
            ) from e
        elif status_code == 403:
            raise SparkPermissionError(
                "Access forbidden - check your permissions"
            ) from e
        elif status_code == 404:
            raise SparkNotFoundError("Resource not found") from e
        elif status_code == 429:
            error: SparkAPIError = SparkRateLimitError(
                "Rate limit exceeded - please try again later"
            )
            return (error, attempt < self.max_retries)

        error_msg = f"API request failed with status {status_code}"

        # Pull a message out of the body if the server sent one
        try:
            if e.response.content:
                error_data = e.response.json()
                if isinstance(error_data, dict):
                    msg = (
                        error_data.get("message")
                        or error_data.get("error")
                        or error_data.get("detail")
                    )
                    if msg:
                        error_msg = f"{error_msg}: {msg}"
        except ValueError:
            pass

        error = SparkAPIError(error_msg)
        should_retry = 500 <= status_code < 600 and attempt < self.max_retries
        return (error, should_retry)

    def _request(
        self,
        method: str,
        endpoint: str,
        retry: bool = True,
        expect_json: bool = True,
        **kwargs: Any,
    ) -> Any:
        """Make an API request with retry logic.

        Args:
            method: HTTP method
            endpoint: API endpoint path
            retry: Whether transient failures are retried
            expect_json: Parse and return the JSON body; when False the
                response body is ignored and None is returned
            **kwargs: Additional arguments passed to httpx

        Returns:
            Response JSON data (or None when ``expect_json`` is False)

        Raises:
            SparkAPIError: If the request fails after all retries
        """
        url = f"{self.api_url}/{endpoint.lstrip('/')}"
        max_attempts = self.max_retries + 1 if retry else 1
        last_exception: SparkAPIError | None = None
        client = self._get_client()

        for attempt in range(max_attempts):
            can_retry = retry and attempt < max_attempts - 1
            try:
                response = client.request(method, url, **kwargs)
                response.raise_for_status()

                if not expect_json:
                    return None

                content_type = response.headers.get("Content-Type", "")
                if response.content and "application/json" not in content_type:
                    # An HTML page usually means the gateway rejected the key
                    if "text/html" in content_type:
                        raise SparkAuthenticationError(
                            "Invalid API key - server returned HTML instead of JSON"
                        )
                    raise SparkInvalidResponseError(
                        f"Unexpected response type: {content_type}"
                    )

                if response.content:
                    try:
                        return response.json()
                    except ValueError as e:
                        raise SparkInvalidResponseError(
                            "Invalid JSON response from server"
                        ) from e
                return {}

            except httpx.HTTPStatusError as e:
                error, should_retry = self._handle_http_error(e, attempt)
                last_exception = error

                if should_retry and can_retry:
                    retry_after = e.response.headers.get("Retry-After")
                    if (
                        isinstance(error, SparkRateLimitError)
                        and retry_after
                        and retry_after.isdigit()
                    ):
                        delay = float(retry_after)
                    else:
                        delay = self._calculate_retry_delay(attempt)
                    time.sleep(delay)
                    continue
                raise error from e
            except SparkAPIError:
                raise
            except httpx.RequestError as e:
                error = SparkNetworkError(f"Network error: {e}")
                last_exception = error
                if can_retry and self._should_retry(error, attempt):
                    time.sleep(self._calculate_retry_delay(attempt))
                    continue
                raise error from e

        if last_exception:
            raise last_exception
        raise SparkAPIError("Request failed after all retry attempts")

    # =========================
    # Content Operations
    # =========================

    def list_content(self, codex_id: str, page: int = 1, num_items: int = 100) -> Any:
        """Fetch one page of the content listing for a codex.

        The listing is never retried; any non-success status propagates.

        Args:
            codex_id: Codex to list
            page: Page number (1-based)
            num_items: Page size

        Returns:
            Response with ``data`` (list of ``{id, title, modified_at}``)
            and ``total_record`` keys
        """
        payload = {"codex_id": codex_id, "page": page, "num_items": num_items}
        return self._request("POST", "/v1/content/filter", retry=False, json=payload)

    def delete_content(self, content_id: str) -> None:
        """Delete a content item from the codex.

        Args:
            content_id: Remote content identifier
        """
        self._request("DELETE", f"/v1/content/{content_id}", expect_json=False)

    def _detect_mime_type(self, file_path: Path) -> str:
        """Guess the MIME type of a file from its name."""
        mime_type, _ = mimetypes.guess_type(str(file_path))
        return mime_type or "application/octet-stream"

    def upload_content(self, file_path: Path, codex_id: str) -> None:
        """Upload a file into the codex as a new content item.

        Args:
            file_path: Local path to the file
            codex_id: Codex that receives the content

        Raises:
            SparkFileNotFoundError: If the file doesn't exist
            SparkUploadError: If the file cannot be read
            SparkAPIError: If the upload request fails
        """
        if not file_path.is_file():
            raise SparkFileNotFoundError(str(file_path))

        try:
            # Bytes rather than a handle so a retried request resends the body
            content = file_path.read_bytes()
        except OSError as e:
            raise SparkUploadError(f"Could not read {file_path}: {e}") from e

        files = {
            "file": (file_path.name, content, self._detect_mime_type(file_path))
        }
        self._request(
            "POST",
            "/v1/content",
            expect_json=False,
            files=files,
            data={"codex_id": codex_id},
        )
