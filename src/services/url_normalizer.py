"""YouTube URL normalization.

Every accepted spelling of a video URL collapses to one canonical watch URL so
that cache keys and logs refer to the same video the same way.
"""

import logging
import re
from typing import Optional
from urllib.parse import urlparse

from models.errors import InvalidUrl
from models.video import VideoRef
from services.platform_client import PlatformClient

logger = logging.getLogger(__name__)

WATCH_URL_TEMPLATE = "https://www.youtube.com/watch?v={video_id}"

VIDEO_ID_RE = re.compile(r"^[0-9A-Za-z_-]{11}$")

# Checked in order: short link, shorts, full watch URL
URL_PATTERNS = [
    re.compile(r"youtu\.be/([^?&#/]+)"),
    re.compile(r"youtube\.com/shorts/([^?&#/]+)"),
    re.compile(r"youtube\.com/watch\?(?:[^#]*&)?v=([^&#]+)"),
]

VALID_EXAMPLES = [
    "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
    "https://youtu.be/dQw4w9WgXcQ",
    "https://www.youtube.com/shorts/dQw4w9WgXcQ",
]


def is_valid_video_id(video_id: Optional[str]) -> bool:
    """Check the platform's native 11-character id format."""
    return bool(video_id) and bool(VIDEO_ID_RE.match(video_id))


def canonical_url(video_id: str) -> str:
    return WATCH_URL_TEMPLATE.format(video_id=video_id)


def _looks_like_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class UrlNormalizer:
    """Converts raw user input into a VideoRef.

    URLs that match none of the known patterns are handed to the platform
    client's validator and id extractor.
    """

    def __init__(self, platform_client: Optional[PlatformClient] = None):
        self.platform_client = platform_client

    def normalize(self, raw: Optional[str]) -> VideoRef:
        """Normalize ``raw`` into a VideoRef.

        Raises:
            InvalidUrl: Empty input, unrecognised URL, or malformed id
        """
        if raw is None or not raw.strip():
            raise InvalidUrl(received=raw)

        value = raw.strip()
        try:
            video_id = self._extract(value)
        except InvalidUrl:
            raise
        except Exception as e:
            logger.debug(f"URL normalization failed for {value!r}: {e}")
            raise InvalidUrl(received=raw) from e

        if not is_valid_video_id(video_id):
            raise InvalidUrl(received=raw)

        return VideoRef(canonical_url=canonical_url(video_id), video_id=video_id)

    def _extract(self, value: str) -> Optional[str]:
        for pattern in URL_PATTERNS:
            match = pattern.search(value)
            if match:
                return match.group(1)

        if self.platform_client is None or not _looks_like_url(value):
            return None
        if not self.platform_client.validate_url(value):
            return None
        return self.platform_client.extract_id(value)


def normalize(raw: Optional[str], platform_client: Optional[PlatformClient] = None) -> VideoRef:
    """Module-level shortcut for ``UrlNormalizer(platform_client).normalize(raw)``."""
    return UrlNormalizer(platform_client).normalize(raw)
