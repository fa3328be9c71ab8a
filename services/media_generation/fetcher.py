"""
Result Fetcher

Downloads the finished video from the URI the service returns. The URI is
only readable with the API key appended as a `key` query parameter.
"""

import logging
from typing import Optional

import httpx

from .errors import FetchError, classify_error

logger = logging.getLogger(__name__)


class ResultFetcher:
    """Single-shot downloader for generated artifacts."""

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 300.0,
    ):
        self._http_client = http_client
        self._owns_client = http_client is None
        self.timeout = timeout

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
        return self._http_client

    async def close(self):
        """Close the HTTP client if this fetcher created it."""
        if self._http_client and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    async def fetch(self, uri: str, api_key: str) -> bytes:
        """
        Retrieve the binary payload behind a result URI.

        Args:
            uri: Download link from the finished operation
            api_key: Credential appended to the query string

        Returns:
            The raw bytes

        Raises:
            FetchError: Transport failure or non-2xx response
        """
        client = await self._get_client()

        try:
            # params= would replace the query already on the URI (alt=media)
            url = httpx.URL(uri).copy_merge_params({"key": api_key})
            response = await client.get(url, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"Download failed with HTTP {status}")
            raise FetchError(f"Failed to download generated video (HTTP {status})") from e
        except httpx.HTTPError as e:
            logger.error(f"Download failed: {type(e).__name__}: {e}")
            raise FetchError(
                f"Failed to download generated video: {type(e).__name__}",
                classify_error(e),
            ) from e

        logger.info(f"Video downloaded ({len(response.content) / 1024 / 1024:.1f} MB)")
        return response.content
