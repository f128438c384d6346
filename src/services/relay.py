"""Relay transport - HTTP client for fetching pages and media through third parties."""

import logging
from typing import Optional

import httpx

from models.errors import TransportError
from utils.config import DEFAULT_RELAY_URL

logger = logging.getLogger(__name__)


class RelayTransport:
    """HTTP transport used as the fallback path and for small media payloads.

    ``fetch_page`` goes through an allorigins-style relay, which answers
    ``GET <relay>?url=<target>`` with ``{"contents": "<page body>", ...}``.
    ``fetch_bytes`` downloads a media URL and buffers it in memory.
    """

    def __init__(
        self,
        relay_url: str = DEFAULT_RELAY_URL,
        relay_timeout: float = 10.0,
        media_timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize relay transport.

        Args:
            relay_url: Relay endpoint taking the target as a ``url`` query parameter
            relay_timeout: Timeout in seconds for relay page fetches
            media_timeout: Timeout in seconds for media downloads
            client: Optional pre-built httpx client (tests inject a mock transport)
        """
        self.relay_url = relay_url
        self.relay_timeout = relay_timeout
        self.media_timeout = media_timeout
        self.client = client or httpx.AsyncClient(follow_redirects=True)

    async def fetch_page(self, url: str) -> str:
        """Fetch ``url`` through the relay and return the page body.

        Returns:
            Page contents, or an empty string when the relay returned none

        Raises:
            TransportError: The relay was unreachable or answered with an error
        """
        logger.info(f"Fetching {url} via relay")
        try:
            response = await self.client.get(
                self.relay_url,
                params={"url": url},
                timeout=self.relay_timeout,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise TransportError(f"Relay timed out after {self.relay_timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise TransportError(f"Relay returned status {e.response.status_code}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"Relay request failed: {e}") from e
        except ValueError as e:
            raise TransportError(f"Relay returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise TransportError("Relay returned an unexpected payload")
        return data.get("contents") or ""

    async def fetch_bytes(self, url: str, headers: Optional[dict[str, str]] = None) -> bytes:
        """Download ``url`` fully into memory.

        Raises:
            TransportError: The download failed or returned a non-2xx status
        """
        chunks: list[bytes] = []
        try:
            async with self.client.stream(
                "GET", url, headers=headers, timeout=self.media_timeout
            ) as response:
                response.raise_for_status()
                async for chunk in response.aiter_bytes():
                    chunks.append(chunk)
        except httpx.TimeoutException as e:
            raise TransportError(f"Media download timed out after {self.media_timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise TransportError(f"Media server returned status {e.response.status_code}") from e
        except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError) as e:
            raise TransportError(f"Media download failed: {e}") from e

        payload = b"".join(chunks)
        logger.debug(f"Buffered {len(payload)} bytes from media URL")
        return payload

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
