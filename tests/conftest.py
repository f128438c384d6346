"""Shared pytest fixtures for vidgrab tests."""

import random
import sys
from pathlib import Path
from typing import Dict, Optional

import pytest

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from models.errors import TransportError  # noqa: E402
from models.video import (  # noqa: E402
    RequestOptions,
    StreamVariant,
    Thumbnail,
    VideoMetadata,
)
from services.platform_client import PlatformClient  # noqa: E402
from services.video_service import VideoService  # noqa: E402
from utils.cache import ResponseCache  # noqa: E402

VIDEO_ID = "dQw4w9WgXcQ"
CANONICAL_URL = f"https://www.youtube.com/watch?v={VIDEO_ID}"


class FakeClock:
    """Manually advanced clock returning seconds."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000


class StubPlatformClient(PlatformClient):
    """Platform client that fails a set number of times before succeeding."""

    def __init__(
        self,
        metadata: VideoMetadata,
        direct_failures: int = 0,
        error: Optional[Exception] = None,
        page_metadata: Optional[VideoMetadata] = None,
    ):
        self.metadata = metadata
        self.direct_failures = direct_failures
        self.error = error or RuntimeError("Sign in to confirm you're not a bot")
        self.page_metadata = page_metadata or metadata
        self.url_calls: list[tuple[str, RequestOptions]] = []
        self.page_calls: list[str] = []

    def resolve_from_url(self, url: str, options: RequestOptions) -> VideoMetadata:
        self.url_calls.append((url, options))
        if self.direct_failures < 0 or len(self.url_calls) <= self.direct_failures:
            raise self.error
        return self.metadata

    def resolve_from_page(self, content: str, options: RequestOptions) -> VideoMetadata:
        self.page_calls.append(content)
        return self.page_metadata

    def validate_url(self, url: str) -> bool:
        return "youtube.com/embed/" in url

    def extract_id(self, url: str) -> Optional[str]:
        return url.rstrip("/").rsplit("/", 1)[-1].split("?")[0]


class StubRelay:
    """In-memory stand-in for RelayTransport."""

    def __init__(
        self,
        contents: str = "<html>ytInitialPlayerResponse = {}</html>",
        error: Optional[Exception] = None,
        media: bytes = b"\x00\x00\x00\x18ftypmp42",
        media_error: Optional[Exception] = None,
    ):
        self.contents = contents
        self.error = error
        self.media = media
        self.media_error = media_error
        self.page_calls: list[str] = []
        self.byte_calls: list[str] = []
        self.closed = False

    async def fetch_page(self, url: str) -> str:
        self.page_calls.append(url)
        if self.error:
            raise self.error
        return self.contents

    async def fetch_bytes(self, url: str, headers: Optional[Dict[str, str]] = None) -> bytes:
        self.byte_calls.append(url)
        if self.media_error:
            raise self.media_error
        return self.media

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def sample_variants() -> list[StreamVariant]:
    """Variants in the order YouTube lists them: muxed first, then adaptive."""
    return [
        StreamVariant(
            url="https://rr1.googlevideo.com/videoplayback?itag=18",
            mime_type='video/mp4; codecs="avc1.42001E, mp4a.40.2"',
            has_audio=True,
            has_video=True,
            audio_bitrate=96,
            content_length=12_000_000,
            quality_label="360p",
            format_id="18",
            height=360,
            fps=30,
            bitrate=500,
        ),
        StreamVariant(
            url="https://rr1.googlevideo.com/videoplayback?itag=22",
            mime_type='video/mp4; codecs="avc1.64001F, mp4a.40.2"',
            has_audio=True,
            has_video=True,
            audio_bitrate=192,
            content_length=150_000_000,
            quality_label="720p",
            format_id="22",
            height=720,
            fps=30,
            bitrate=1200,
        ),
        StreamVariant(
            url="https://rr1.googlevideo.com/videoplayback?itag=137",
            mime_type='video/mp4; codecs="avc1.640028"',
            has_audio=False,
            has_video=True,
            content_length=300_000_000,
            quality_label="1080p",
            format_id="137",
            height=1080,
            fps=30,
            bitrate=4000,
        ),
        StreamVariant(
            url="https://rr1.googlevideo.com/videoplayback?itag=140",
            mime_type='audio/mp4; codecs="mp4a.40.2"',
            has_audio=True,
            has_video=False,
            audio_bitrate=128,
            content_length=3_400_000,
            format_id="140",
            bitrate=130,
        ),
        StreamVariant(
            url="https://rr1.googlevideo.com/videoplayback?itag=251",
            mime_type='audio/webm; codecs="opus"',
            has_audio=True,
            has_video=False,
            audio_bitrate=160,
            content_length=3_600_000,
            format_id="251",
            bitrate=160,
        ),
    ]


@pytest.fixture
def sample_metadata(sample_variants) -> VideoMetadata:
    return VideoMetadata(
        video_id=VIDEO_ID,
        title='Rick Astley - Never Gonna Give You Up (Official Music Video) <HD>',
        duration=213,
        thumbnails=[
            Thumbnail(url=f"https://i.ytimg.com/vi/{VIDEO_ID}/default.jpg", width=120, height=90, quality="default"),
            Thumbnail(url=f"https://i.ytimg.com/vi/{VIDEO_ID}/hqdefault.jpg", width=480, height=360, quality="high"),
            Thumbnail(url=f"https://i.ytimg.com/vi/{VIDEO_ID}/maxresdefault.jpg", width=1280, height=720, quality="maxres"),
        ],
        view_count=1_500_000_000,
        upload_date="2009-10-25",
        is_live=False,
        variants=sample_variants,
    )


@pytest.fixture
def platform_client(sample_metadata) -> StubPlatformClient:
    return StubPlatformClient(sample_metadata)


@pytest.fixture
def stub_relay() -> StubRelay:
    return StubRelay()


@pytest.fixture
def response_cache(fake_clock) -> ResponseCache:
    return ResponseCache(capacity=50, ttl_ms=300_000, clock=fake_clock)


@pytest.fixture
def video_service(platform_client, stub_relay, response_cache, seeded_rng) -> VideoService:
    return VideoService(
        platform_client=platform_client,
        relay=stub_relay,
        cache=response_cache,
        rng=seeded_rng,
    )


@pytest.fixture
def sample_config() -> Dict:
    """Sample configuration for testing."""
    return {
        "cache_enabled": True,
        "cache_capacity": 50,
        "cache_ttl_ms": 300000,
        "direct_attempts": 3,
        "direct_timeout_seconds": 15.0,
        "send_forwarded_for": True,
        "ytdlp_cookies_file": None,
        "relay_url": "https://api.allorigins.win/get",
        "relay_timeout_seconds": 10.0,
        "large_file_threshold": 100000000,
        "media_timeout_seconds": 60.0,
        "cors_origins": ["*"],
        "port": 10000,
        "log_level": "INFO",
        "log_json": False,
    }


@pytest.fixture
def relay_failure() -> TransportError:
    return TransportError("Relay timed out after 10.0s")
