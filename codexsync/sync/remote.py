"""Fetching and validating the remote Codex inventory."""

import logging
import re
from typing import Any, Optional

from ..api import SparkClient
from ..exceptions import SparkInvalidResponseError
from ..models import RemoteInventory, RemoteRecord
from ..utils import DEFAULT_PAGE_SIZE

logger = logging.getLogger(__name__)

CONTENT_ID_PATTERN = re.compile(
    r"^dc_[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$"
)
TIMESTAMP_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}")

# Only the first few malformed entries are logged individually
MAX_MALFORMED_LOGGED = 3

_FIELD_SEPARATORS = ("\t", "\n", "\r")


def is_malformed(item: Any) -> bool:
    """Check whether a listing item fails to yield exactly three fields.

    Args:
        item: One element of the ``data`` list

    Returns:
        True if the item is not an object, lacks ``id`` or ``title``, or
        has a field value containing a field/record separator
    """
    if not isinstance(item, dict):
        return True
    if not item.get("id") or not item.get("title"):
        return True
    for key in ("id", "title", "modified_at"):
        value = item.get(key)
        if value is None:
            continue
        text = str(value)
        if any(sep in text for sep in _FIELD_SEPARATORS):
            return True
    return False


def corruption_reason(title: str) -> Optional[str]:
    """Return why a title looks corrupted, or None if it is a real filename.

    Examples:
        >>> corruption_reason("dc_0a1b2c3d-1111-2222-3333-444455556666")
        'title is content_id'
        >>> corruption_reason("2025-01-15T10:30:00Z")
        'title is timestamp'
        >>> corruption_reason("notes.md") is None
        True
    """
    if CONTENT_ID_PATTERN.match(title):
        return "title is content_id"
    if TIMESTAMP_PATTERN.match(title):
        return "title is timestamp"
    return None


class RemoteInventoryFetcher:
    """Pages through the Codex content listing and validates each record."""

    def __init__(
        self,
        client: SparkClient,
        codex_id: str,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        """Initialize the fetcher.

        Args:
            client: Spark API client
            codex_id: Codex whose content is listed
            page_size: Number of items requested per page (default: 100)
        """
        self.client = client
        self.codex_id = codex_id
        self.page_size = page_size

    def fetch_raw(self) -> list[Any]:
        """Fetch every listing item without validation.

        Stops once the cumulative count reaches ``total_record`` or a page
        comes back short. Any API error propagates to the caller.

        Returns:
            List of raw items in listing order

        Raises:
            SparkAPIError: If the listing endpoint returns a non-success status
            SparkInvalidResponseError: If a page has no ``data`` list
        """
        items: list[Any] = []
        page = 1

        while True:
            response = self.client.list_content(
                self.codex_id, page=page, num_items=self.page_size
            )
            if not isinstance(response, dict) or not isinstance(
                response.get("data"), list
            ):
                raise SparkInvalidResponseError(
                    f"Listing page {page} has no 'data' list"
                )

            data = response["data"]
            items.extend(data)
            logger.debug("Fetched page %d with %d item(s)", page, len(data))

            total_record = response.get("total_record")
            if isinstance(total_record, int) and len(items) >= total_record:
                break
            if len(data) < self.page_size:
                break

            page += 1

        return items

    def fetch(self) -> RemoteInventory:
        """Fetch the complete, validated remote inventory.

        Returns:
            RemoteInventory with valid records and counts of dropped entries
        """
        inventory = RemoteInventory()

        for item in self.fetch_raw():
            if is_malformed(item):
                inventory.malformed_count += 1
                if inventory.malformed_count <= MAX_MALFORMED_LOGGED:
                    logger.warning("Skipping malformed inventory entry: %r", item)
                continue

            record = RemoteRecord.from_api_response(item)
            reason = corruption_reason(record.title)
            if reason:
                inventory.corrupted_count += 1
                logger.debug(
                    "Skipping corrupted entry (%s): %s", reason, record.title
                )
                continue

            inventory.records.append(record)

        if inventory.malformed_count > MAX_MALFORMED_LOGGED:
            logger.warning(
                "... and %d more malformed entries",
                inventory.malformed_count - MAX_MALFORMED_LOGGED,
            )

        logger.debug(
            "Remote inventory: %d valid, %d malformed, %d corrupted",
            len(inventory.records),
            inventory.malformed_count,
            inventory.corrupted_count,
        )
        return inventory
