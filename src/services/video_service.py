"""Request orchestration for the info and download handlers."""

import logging
import random
from dataclasses import dataclass
from typing import Optional

from models.video import OutputFormat, StreamVariant, VideoMetadata, VideoRef
from services.format_selector import LARGE_FILE_THRESHOLD, is_large, select_format
from services.headers import random_headers
from services.metadata_fetcher import MetadataFetcher
from services.platform_client import PlatformClient, YtDlpPlatformClient
from services.relay import RelayTransport
from services.response_shaper import (
    build_download_payload,
    build_info_payload,
    download_filename,
)
from services.url_normalizer import UrlNormalizer
from utils.cache import ResponseCache, load_cache_from_config, make_key

logger = logging.getLogger(__name__)

INFO_CACHE_KIND = "info"


@dataclass
class DownloadResult:
    """Outcome of a download request.

    Exactly one of ``payload`` (pass-through JSON) and ``content``
    (materialized bytes) is set.
    """

    payload: Optional[dict] = None
    content: Optional[bytes] = None
    media_type: str = "application/octet-stream"
    filename: Optional[str] = None

    @property
    def is_materialized(self) -> bool:
        return self.content is not None


class VideoService:
    """Runs the resolution pipeline for one request at a time.

    normalize -> cache lookup -> resilient fetch -> select (download only)
    -> shape -> cache store. Only JSON payloads are cached, and only after
    the whole pipeline succeeded.
    """

    def __init__(
        self,
        platform_client: PlatformClient,
        relay: RelayTransport,
        cache: ResponseCache,
        fetcher: Optional[MetadataFetcher] = None,
        large_file_threshold: int = LARGE_FILE_THRESHOLD,
        rng: Optional[random.Random] = None,
    ):
        self.platform_client = platform_client
        self.relay = relay
        self.cache = cache
        self.fetcher = fetcher or MetadataFetcher(platform_client, relay, rng=rng)
        self.normalizer = UrlNormalizer(platform_client)
        self.large_file_threshold = large_file_threshold
        self.rng = rng

    @classmethod
    def from_config(cls, config: dict) -> "VideoService":
        """Build a service with the production collaborators."""
        platform_client = YtDlpPlatformClient(cookies_file=config.get("ytdlp_cookies_file"))
        relay = RelayTransport(
            relay_url=config["relay_url"],
            relay_timeout=config.get("relay_timeout_seconds", 10.0),
            media_timeout=config.get("media_timeout_seconds", 60.0),
        )
        fetcher = MetadataFetcher(
            platform_client,
            relay,
            attempts=config.get("direct_attempts", 3),
            direct_timeout=config.get("direct_timeout_seconds", 15.0),
            forwarded_for=config.get("send_forwarded_for", True),
        )
        return cls(
            platform_client=platform_client,
            relay=relay,
            cache=load_cache_from_config(config),
            fetcher=fetcher,
            large_file_threshold=config.get("large_file_threshold", LARGE_FILE_THRESHOLD),
        )

    def normalize(self, raw_url: Optional[str]) -> VideoRef:
        return self.normalizer.normalize(raw_url)

    async def get_info(self, raw_url: Optional[str]) -> dict:
        """Resolve the info payload for ``raw_url``.

        Raises:
            InvalidUrl: ``raw_url`` is missing or not a video URL
            ResolutionFailed: Metadata could not be fetched
        """
        ref = self.normalize(raw_url)
        cache_key = make_key(ref.canonical_url, INFO_CACHE_KIND)

        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        metadata = await self.fetcher.resolve(ref)
        payload = build_info_payload(metadata)

        self.cache.put(cache_key, payload)
        return payload

    async def prepare_download(
        self,
        raw_url: Optional[str],
        output_format: OutputFormat = OutputFormat.MP4,
        quality: Optional[str] = None,
    ) -> DownloadResult:
        """Select a stream for ``raw_url`` and shape the download response.

        Large (or unknown-size) streams come back as a JSON payload with the
        direct URL; smaller ones are downloaded and returned as bytes.

        Raises:
            InvalidUrl: ``raw_url`` is missing or not a video URL
            NoMatchingFormat: No stream satisfies the format/quality
            ResolutionFailed: Metadata could not be fetched
            TransportError: A small stream could not be materialized
        """
        ref = self.normalize(raw_url)
        kind = output_format.stream_kind
        cache_key = make_key(ref.canonical_url, kind.value, quality)

        cached = self.cache.get(cache_key)
        if cached is not None:
            return DownloadResult(payload=cached, media_type="application/json")

        metadata = await self.fetcher.resolve(ref, kind, quality)
        variant = select_format(metadata.variants, kind, quality)
        logger.info(
            f"Selected {variant.format_id or variant.quality_label} for {ref.video_id} "
            f"({kind.value}, {variant.content_length or 'unknown'} bytes)"
        )

        if is_large(variant, self.large_file_threshold):
            payload = build_download_payload(metadata, variant, output_format)
            self.cache.put(cache_key, payload)
            return DownloadResult(payload=payload, media_type="application/json")

        return await self._materialize(metadata, variant)

    async def _materialize(self, metadata: VideoMetadata, variant: StreamVariant) -> DownloadResult:
        content = await self.relay.fetch_bytes(variant.url, headers=random_headers(self.rng))
        logger.info(f"Materialized {len(content)} bytes for {metadata.video_id}")
        return DownloadResult(
            content=content,
            media_type=variant.container,
            filename=download_filename(metadata, variant),
        )

    async def close(self) -> None:
        await self.relay.close()
