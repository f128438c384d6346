"""Video-related data models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class StreamKind(str, Enum):
    """Which stream categories a request is willing to accept."""

    AUDIO_ONLY = "audio-only"
    VIDEO_AND_AUDIO = "video+audio"
    VIDEO_ONLY = "video-only"


class OutputFormat(str, Enum):
    """Output format requested by the download handler."""

    MP3 = "mp3"
    MP4 = "mp4"

    @property
    def stream_kind(self) -> StreamKind:
        """Stream filter used when selecting a variant for this format."""
        if self is OutputFormat.MP3:
            return StreamKind.AUDIO_ONLY
        return StreamKind.VIDEO_AND_AUDIO


@dataclass(frozen=True)
class VideoRef:
    """Normalized reference to a single video.

    Only the URL normalizer creates these, so ``canonical_url`` is always the
    watch-URL template filled in with ``video_id``.
    """

    canonical_url: str
    video_id: str


@dataclass(frozen=True)
class RequestOptions:
    """Options for one outbound metadata fetch attempt."""

    headers: dict[str, str]
    timeout: float
    quality: Optional[str] = None
    kind: StreamKind = StreamKind.VIDEO_AND_AUDIO


@dataclass(frozen=True)
class Thumbnail:
    """One thumbnail candidate."""

    url: str
    width: int = 0
    height: int = 0
    quality: Optional[str] = None  # maxres, standard, high, medium, default


@dataclass(frozen=True)
class StreamVariant:
    """One downloadable representation of a video (codec/quality/container)."""

    url: str
    mime_type: str
    has_audio: bool
    has_video: bool
    audio_bitrate: Optional[int] = None  # kbps
    content_length: Optional[int] = None  # bytes
    quality_label: Optional[str] = None  # e.g. "720p", "1080p60"
    format_id: Optional[str] = None  # itag / yt-dlp format id
    height: int = 0
    fps: float = 0
    bitrate: int = 0  # overall bitrate in kbps

    @property
    def is_audio_only(self) -> bool:
        return self.has_audio and not self.has_video

    @property
    def is_video_only(self) -> bool:
        return self.has_video and not self.has_audio

    @property
    def is_combined(self) -> bool:
        return self.has_audio and self.has_video

    @property
    def container(self) -> str:
        """MIME type without codec parameters (``video/mp4; codecs=...`` -> ``video/mp4``)."""
        return self.mime_type.split(";")[0].strip()


@dataclass
class VideoMetadata:
    """Resolved metadata for one video, including every stream variant.

    ``variants`` keeps the order the platform returned them in; format
    selection relies on that order for tie-breaks.
    """

    video_id: str
    title: str
    duration: int  # in seconds
    thumbnails: list[Thumbnail] = field(default_factory=list)
    view_count: Optional[int] = None
    upload_date: Optional[str] = None  # YYYY-MM-DD
    is_live: bool = False
    variants: list[StreamVariant] = field(default_factory=list)
    source: str = "direct"  # direct or relay


@dataclass
class CacheEntry:
    """A cached response payload with its insertion time."""

    key: str
    payload: Any
    created_at: float
