"""Video platform client abstraction and its yt-dlp implementation."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import yt_dlp
from yt_dlp.extractor.youtube import YoutubeIE

from models.video import RequestOptions, StreamVariant, Thumbnail, VideoMetadata
from services.page_parser import parse_watch_page, thumbnail_quality

logger = logging.getLogger(__name__)

# Configure yt-dlp logging to be silent
logging.getLogger("yt_dlp").setLevel(logging.CRITICAL)
logging.getLogger("yt_dlp.extractor").setLevel(logging.CRITICAL)

# Manifest protocols do not expose a single direct media URL
MANIFEST_PROTOCOLS = {"m3u8", "m3u8_native", "http_dash_segments", "f4m", "ism"}

EXT_MIME_TYPES = {
    ("audio", "m4a"): "audio/mp4",
    ("audio", "mp4"): "audio/mp4",
    ("audio", "webm"): "audio/webm",
    ("audio", "mp3"): "audio/mpeg",
    ("audio", "opus"): "audio/ogg",
    ("video", "mp4"): "video/mp4",
    ("video", "webm"): "video/webm",
    ("video", "3gp"): "video/3gpp",
}


class PlatformClient(ABC):
    """Abstract capability that turns a video URL or page into VideoMetadata."""

    @abstractmethod
    def resolve_from_url(self, url: str, options: RequestOptions) -> VideoMetadata:
        """Resolve metadata by fetching the platform directly.

        Args:
            url: Canonical watch URL
            options: Headers, timeout and stream preferences for this attempt

        Returns:
            Resolved VideoMetadata

        Raises:
            Exception: Any failure; callers treat it as a failed attempt
        """

    @abstractmethod
    def resolve_from_page(self, content: str, options: RequestOptions) -> VideoMetadata:
        """Resolve metadata from already-fetched watch-page content."""

    @abstractmethod
    def validate_url(self, url: str) -> bool:
        """Check whether the platform recognises ``url`` as a video URL."""

    @abstractmethod
    def extract_id(self, url: str) -> Optional[str]:
        """Extract the platform's native video id from ``url``."""


def _mime_type(fmt: dict, has_video: bool) -> str:
    ext = (fmt.get("ext") or "").lower()
    major = "video" if has_video else "audio"
    mime = EXT_MIME_TYPES.get((major, ext), f"{major}/{ext or 'octet-stream'}")

    codecs = [c for c in (fmt.get("vcodec"), fmt.get("acodec")) if c and c != "none"]
    if codecs:
        mime += f'; codecs="{", ".join(codecs)}"'
    return mime


def _quality_label(fmt: dict, has_video: bool) -> Optional[str]:
    if not has_video:
        return None
    height = fmt.get("height")
    if not height:
        return fmt.get("format_note") or None
    fps = fmt.get("fps") or 0
    return f"{height}p{int(fps)}" if fps > 30 else f"{height}p"


def _format_upload_date(value: Optional[str]) -> Optional[str]:
    # yt-dlp reports YYYYMMDD
    if value and len(value) == 8 and value.isdigit():
        return f"{value[:4]}-{value[4:6]}-{value[6:]}"
    return value


def metadata_from_info(info: dict) -> VideoMetadata:
    """Map a yt-dlp info dict to VideoMetadata."""
    variants = []
    for f in info.get("formats") or []:
        is_video = f.get("vcodec") not in (None, "none")
        is_audio = f.get("acodec") not in (None, "none")

        if not is_video and not is_audio:
            continue
        if not f.get("url") or f.get("protocol") in MANIFEST_PROTOCOLS:
            continue

        abr = f.get("abr")
        variants.append(
            StreamVariant(
                url=f["url"],
                mime_type=_mime_type(f, is_video),
                has_audio=is_audio,
                has_video=is_video,
                audio_bitrate=round(abr) if is_audio and abr else None,
                content_length=f.get("filesize") or f.get("filesize_approx"),
                quality_label=_quality_label(f, is_video),
                format_id=f.get("format_id"),
                height=f.get("height") or 0,
                fps=f.get("fps") or 0,
                bitrate=round(f.get("tbr") or 0),
            )
        )

    thumbnails = []
    for t in info.get("thumbnails") or []:
        if not t.get("url"):
            continue
        thumbnails.append(
            Thumbnail(
                url=t["url"],
                width=t.get("width") or 0,
                height=t.get("height") or 0,
                quality=thumbnail_quality(t["url"]),
            )
        )
    if not thumbnails and info.get("thumbnail"):
        thumbnails.append(
            Thumbnail(url=info["thumbnail"], quality=thumbnail_quality(info["thumbnail"]))
        )

    return VideoMetadata(
        video_id=info.get("id", ""),
        title=info.get("title", "Unknown Title"),
        duration=int(info.get("duration") or 0),
        thumbnails=thumbnails,
        view_count=info.get("view_count"),
        upload_date=_format_upload_date(info.get("upload_date")),
        is_live=bool(info.get("is_live") or info.get("live_status") == "is_live"),
        variants=variants,
        source="direct",
    )


class YtDlpPlatformClient(PlatformClient):
    """YouTube platform client backed by yt-dlp."""

    def __init__(self, cookies_file: Optional[str] = None):
        """Initialize the client.

        Args:
            cookies_file: Optional Netscape cookie file passed to yt-dlp
        """
        self.cookies_file = cookies_file

    def _build_ydl_opts(self, options: RequestOptions) -> dict:
        ydl_opts = {
            "quiet": True,
            "no_warnings": True,
            "noplaylist": True,
            "skip_download": True,
            "extract_flat": False,
            "socket_timeout": options.timeout,
            # Retries are handled by MetadataFetcher
            "retries": 0,
            "http_headers": dict(options.headers),
        }
        if self.cookies_file and Path(self.cookies_file).exists():
            ydl_opts["cookiefile"] = self.cookies_file
        return ydl_opts

    def resolve_from_url(self, url: str, options: RequestOptions) -> VideoMetadata:
        """Resolve metadata with ``extract_info(download=False)``."""
        with yt_dlp.YoutubeDL(self._build_ydl_opts(options)) as ydl:
            info = ydl.extract_info(url, download=False)

        if not info:
            raise ValueError(f"No metadata returned for {url}")
        return metadata_from_info(info)

    def resolve_from_page(self, content: str, options: RequestOptions) -> VideoMetadata:
        """Parse the player response embedded in watch-page HTML."""
        return parse_watch_page(content, source="relay")

    def validate_url(self, url: str) -> bool:
        try:
            return bool(YoutubeIE.suitable(url))
        except Exception as e:
            logger.debug(f"URL validation raised for {url!r}: {e}")
            return False

    def extract_id(self, url: str) -> Optional[str]:
        return YoutubeIE.get_temp_id(url)
