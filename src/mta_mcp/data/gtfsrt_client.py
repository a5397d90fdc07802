import logging

import httpx
from google.protobuf.message import DecodeError
from google.transit import gtfs_realtime_pb2

from mta_mcp.data.config import MTAConfig

logger = logging.getLogger(__name__)


class FeedError(Exception):
    """Raised when a GTFS-RT feed cannot be obtained or decoded."""


class FeedTransportError(FeedError):
    """Raised when the feed endpoint cannot be reached (network, auth, timeout)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class FeedDecodeError(FeedError):
    """Raised when the feed bytes do not parse as a GTFS-RT FeedMessage."""


def decode_feed_message(content: bytes) -> gtfs_realtime_pb2.FeedMessage:
    """Decode raw feed bytes into a FeedMessage.

    Raises:
        FeedDecodeError: If the bytes are not a valid FeedMessage.
    """
    feed = gtfs_realtime_pb2.FeedMessage()
    try:
        feed.ParseFromString(content)
    except (DecodeError, ValueError) as e:
        raise FeedDecodeError(f"Malformed GTFS-RT feed: {e}") from e
    return feed


class GTFSRTClient:
    """Async HTTP client for fetching GTFS-RT feeds from the MTA API.

    Usage:
        async with GTFSRTClient(config) as client:
            message = await client.fetch_feed_message(url)
    """

    def __init__(self, config: MTAConfig, api_key: str | None = None):
        """Initialize the client.

        Args:
            config: MTA configuration with API key and timeout.
            api_key: Optional per-request API key, overrides config.api_key.
        """
        self._config = config
        self._api_key = api_key or config.api_key
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "GTFSRTClient":
        """Enter async context - create HTTP client."""
        headers = {}
        if self._api_key:
            headers["x-api-key"] = self._api_key
        self._client = httpx.AsyncClient(
            headers=headers, timeout=self._config.request_timeout_seconds
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context - close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch_feed_bytes(self, url: str) -> bytes:
        """Fetch the raw protobuf bytes of a feed.

        Raises:
            RuntimeError: If client not initialized.
            FeedTransportError: If the HTTP request fails or returns an error status.
        """
        if not self._client:
            raise RuntimeError("Client not initialized - use 'async with'")

        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            raise FeedTransportError(
                f"Feed endpoint returned {status_code}", status_code=status_code
            ) from e
        except httpx.HTTPError as e:
            raise FeedTransportError(f"Feed request failed: {e}") from e

        return response.content

    async def fetch_feed_message(self, url: str) -> gtfs_realtime_pb2.FeedMessage:
        """Fetch and decode a feed.

        Raises:
            FeedTransportError: If the HTTP request fails.
            FeedDecodeError: If the response is not a valid FeedMessage.
        """
        content = await self.fetch_feed_bytes(url)
        feed = decode_feed_message(content)
        logger.debug(f"Decoded {len(feed.entity)} entities from {url}")
        return feed
