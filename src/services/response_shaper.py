"""Builds the JSON payloads returned by the info and download handlers."""

import re
from typing import Optional, Sequence

from models.video import OutputFormat, StreamVariant, Thumbnail, VideoMetadata
from services.format_selector import summarize_capabilities

THUMBNAIL_PREFERENCE = ["maxres", "standard", "high", "medium", "default"]

MAX_TITLE_LENGTH = 100
DEFAULT_AUDIO_BITRATE = 128

CONTAINER_EXTENSIONS = {
    "audio/mp4": "m4a",
    "audio/webm": "webm",
    "audio/mpeg": "mp3",
    "audio/ogg": "ogg",
    "video/mp4": "mp4",
    "video/webm": "webm",
    "video/3gpp": "3gp",
}

_ILLEGAL_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|]')
_WHITESPACE_RUN = re.compile(r"\s+")


def sanitize_title(title: Optional[str]) -> str:
    """Make a title safe to use as a file name."""
    cleaned = _ILLEGAL_FILENAME_CHARS.sub("", title or "")
    cleaned = _WHITESPACE_RUN.sub(" ", cleaned).strip()
    return cleaned[:MAX_TITLE_LENGTH]


def best_thumbnail(thumbnails: Sequence[Thumbnail]) -> str:
    """Highest preferred quality label, else the widest image, else ""."""
    for quality in THUMBNAIL_PREFERENCE:
        for thumb in thumbnails:
            if thumb.quality == quality:
                return thumb.url
    if not thumbnails:
        return ""
    return max(thumbnails, key=lambda t: t.width).url


def format_duration(seconds: Optional[int]) -> str:
    """``H:MM:SS`` for an hour or more, ``M:SS`` otherwise."""
    total = max(int(seconds or 0), 0)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_view_count(views: Optional[int]) -> str:
    return f"{int(views or 0):,}"


def build_info_payload(metadata: VideoMetadata) -> dict:
    """Payload for the info handler; reports capabilities without selecting."""
    return {
        "title": sanitize_title(metadata.title),
        "thumbnail": best_thumbnail(metadata.thumbnails),
        "duration": format_duration(metadata.duration),
        "durationSeconds": metadata.duration,
        "views": format_view_count(metadata.view_count),
        "videoId": metadata.video_id,
        "isLive": metadata.is_live,
        "uploadDate": metadata.upload_date,
        "formats": summarize_capabilities(metadata.variants),
    }


def build_download_payload(
    metadata: VideoMetadata,
    variant: StreamVariant,
    output_format: OutputFormat,
) -> dict:
    """Pass-through payload for the download handler: the direct stream URL."""
    payload = {
        "url": variant.url,
        "title": sanitize_title(metadata.title),
        "thumbnail": best_thumbnail(metadata.thumbnails),
        "duration": format_duration(metadata.duration),
        "size": variant.content_length,
    }
    if output_format is OutputFormat.MP3:
        payload["bitrate"] = variant.audio_bitrate or DEFAULT_AUDIO_BITRATE
        payload["type"] = "audio/mp3"
    else:
        payload["quality"] = variant.quality_label
        payload["type"] = variant.container
    return payload


def download_filename(metadata: VideoMetadata, variant: StreamVariant) -> str:
    """File name offered for a materialized download.

    The extension follows the stream's actual container, since the bytes
    are served as-is.
    """
    title = sanitize_title(metadata.title) or metadata.video_id or "download"
    extension = CONTAINER_EXTENSIONS.get(variant.container)
    if extension is None:
        extension = variant.container.rsplit("/", 1)[-1] or "bin"
    return f"{title}.{extension}"
