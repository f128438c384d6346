"""Resilient metadata fetching with retries and a relay fallback."""

import asyncio
import logging
import random
from typing import Optional

from models.errors import ResolutionFailed, TransportError, friendly_message
from models.video import StreamKind, VideoMetadata, VideoRef
from services.headers import build_request_options
from services.platform_client import PlatformClient
from services.relay import RelayTransport

logger = logging.getLogger(__name__)

DIRECT_ATTEMPTS = 3
DIRECT_TIMEOUT_SECONDS = 15.0


class MetadataFetcher:
    """Resolves VideoMetadata, absorbing transient and sustained upstream failures.

    Strategy, in this order:
    1. Direct resolution through the platform client, up to ``attempts`` times,
       with new randomized headers on every attempt.
    2. Fetch the watch page through the relay and parse it.

    Only when both are exhausted does ``resolve`` raise ResolutionFailed,
    carrying the message of the last underlying error.
    """

    def __init__(
        self,
        platform_client: PlatformClient,
        relay: RelayTransport,
        attempts: int = DIRECT_ATTEMPTS,
        direct_timeout: float = DIRECT_TIMEOUT_SECONDS,
        rng: Optional[random.Random] = None,
        forwarded_for: bool = True,
    ):
        """Initialize the fetcher.

        Args:
            platform_client: Direct metadata capability
            relay: Relay transport used for the fallback path
            attempts: Total direct attempts before falling back (default: 3)
            direct_timeout: Per-attempt timeout in seconds (default: 15)
            rng: Random source for header generation
            forwarded_for: Send a synthetic X-Forwarded-For header
        """
        self.platform_client = platform_client
        self.relay = relay
        self.attempts = attempts
        self.direct_timeout = direct_timeout
        self.rng = rng
        self.forwarded_for = forwarded_for

    async def resolve(
        self,
        ref: VideoRef,
        kind: StreamKind = StreamKind.VIDEO_AND_AUDIO,
        quality: Optional[str] = None,
    ) -> VideoMetadata:
        """Resolve metadata for ``ref``.

        Raises:
            ResolutionFailed: Direct attempts and the relay fallback all failed
        """
        last_error: Optional[Exception] = None

        for attempt in range(1, self.attempts + 1):
            options = build_request_options(
                kind,
                quality,
                timeout=self.direct_timeout,
                rng=self.rng,
                forwarded_for=self.forwarded_for,
            )
            try:
                metadata = await asyncio.wait_for(
                    asyncio.to_thread(
                        self.platform_client.resolve_from_url, ref.canonical_url, options
                    ),
                    timeout=self.direct_timeout,
                )
                logger.info(f"Resolved {ref.video_id} directly (attempt {attempt}/{self.attempts})")
                return metadata
            except asyncio.TimeoutError:
                last_error = TimeoutError(
                    f"Direct fetch timed out after {self.direct_timeout}s"
                )
            except Exception as e:
                last_error = e

            logger.warning(
                f"Direct fetch failed for {ref.video_id} "
                f"(attempt {attempt}/{self.attempts}): {last_error}"
            )

        logger.warning(f"Direct fetch exhausted for {ref.video_id}, trying relay")
        return await self._resolve_via_relay(ref, kind, quality, last_error)

    async def _resolve_via_relay(
        self,
        ref: VideoRef,
        kind: StreamKind,
        quality: Optional[str],
        direct_error: Optional[Exception],
    ) -> VideoMetadata:
        # The user-facing message may come from the direct error (private video,
        # unavailable video); details always describe the final failure.
        def failed(reason: str) -> ResolutionFailed:
            details = f"All download methods failed: {reason}"
            return ResolutionFailed(
                details, message=friendly_message(f"{direct_error} {reason}")
            )

        try:
            content = await self.relay.fetch_page(ref.canonical_url)
        except TransportError as e:
            logger.error(f"Relay fetch failed for {ref.video_id}: {e}")
            raise failed(e.details) from e
        except Exception as e:
            logger.error(f"Relay fetch failed for {ref.video_id}: {e}")
            raise failed(str(e)) from e

        if not content:
            logger.error(f"Relay returned empty content for {ref.video_id}")
            raise failed("Proxy returned empty response")

        options = build_request_options(
            kind, quality, rng=self.rng, forwarded_for=self.forwarded_for
        )
        try:
            metadata = await asyncio.to_thread(
                self.platform_client.resolve_from_page, content, options
            )
        except Exception as e:
            logger.error(f"Could not parse relayed page for {ref.video_id}: {e}")
            raise failed(str(e)) from e

        logger.info(f"Resolved {ref.video_id} via relay")
        if not metadata.video_id:
            metadata.video_id = ref.video_id
        return metadata
