"""Metadata extraction from raw YouTube watch-page HTML.

Used when the page had to be fetched through the relay: the watch HTML embeds
the player response as a JSON object assigned to ``ytInitialPlayerResponse``.
"""

import json
import logging
import re
from typing import Any, Optional

from models.video import StreamVariant, Thumbnail, VideoMetadata

logger = logging.getLogger(__name__)

PLAYER_RESPONSE_RE = re.compile(
    r"(?:var\s+ytInitialPlayerResponse|window\[[\"']ytInitialPlayerResponse[\"']\]|ytInitialPlayerResponse)\s*=\s*"
)

# Thumbnail file names and the quality label they carry
THUMBNAIL_QUALITIES = {
    "maxresdefault": "maxres",
    "maxres2": "maxres",
    "sddefault": "standard",
    "hqdefault": "high",
    "hq720": "high",
    "mqdefault": "medium",
    "default": "default",
}

# Approximate audio bitrates (kbps) for muxed formats, which only report a bucket
AUDIO_QUALITY_BITRATES = {
    "AUDIO_QUALITY_ULTRALOW": 32,
    "AUDIO_QUALITY_LOW": 48,
    "AUDIO_QUALITY_MEDIUM": 128,
    "AUDIO_QUALITY_HIGH": 256,
}

_THUMBNAIL_NAME_RE = re.compile(r"/([a-z0-9_]+)\.(?:jpg|webp|png)", re.IGNORECASE)


def thumbnail_quality(url: str) -> Optional[str]:
    """Quality label implied by a thumbnail URL, if recognisable."""
    match = _THUMBNAIL_NAME_RE.search(url or "")
    if not match:
        return None
    name = match.group(1).lower()
    if name.endswith("_live"):
        name = name[: -len("_live")]
    return THUMBNAIL_QUALITIES.get(name)


def extract_player_response(html: str) -> dict:
    """Pull the ``ytInitialPlayerResponse`` object out of watch-page HTML.

    Raises:
        ValueError: If the page carries no parseable player response
    """
    decoder = json.JSONDecoder()
    for match in PLAYER_RESPONSE_RE.finditer(html or ""):
        start = match.end()
        if start >= len(html) or html[start] != "{":
            continue
        try:
            data, _ = decoder.raw_decode(html, start)
        except json.JSONDecodeError as e:
            logger.debug(f"Player response candidate at {start} did not parse: {e}")
            continue
        if isinstance(data, dict):
            return data
    raise ValueError("Page has no ytInitialPlayerResponse")


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _variant_from_format(fmt: dict) -> Optional[StreamVariant]:
    url = fmt.get("url")
    if not url:
        # signatureCipher formats need the player JS to decode, skip them
        return None

    mime_type = fmt.get("mimeType", "")
    has_video = mime_type.startswith("video/")
    has_audio = mime_type.startswith("audio/") or "audioQuality" in fmt
    if not has_video and not has_audio:
        return None

    bitrate_bps = _to_int(fmt.get("averageBitrate")) or _to_int(fmt.get("bitrate")) or 0
    audio_bitrate = None
    if has_audio:
        if has_video:
            audio_bitrate = AUDIO_QUALITY_BITRATES.get(fmt.get("audioQuality", ""))
        else:
            audio_bitrate = round(bitrate_bps / 1000) if bitrate_bps else None

    return StreamVariant(
        url=url,
        mime_type=mime_type,
        has_audio=has_audio,
        has_video=has_video,
        audio_bitrate=audio_bitrate,
        content_length=_to_int(fmt.get("contentLength")),
        quality_label=fmt.get("qualityLabel"),
        format_id=str(fmt["itag"]) if fmt.get("itag") is not None else None,
        height=_to_int(fmt.get("height")) or 0,
        fps=fmt.get("fps") or 0,
        bitrate=round(bitrate_bps / 1000),
    )


def metadata_from_player_response(data: dict, source: str = "relay") -> VideoMetadata:
    """Map a player response object to VideoMetadata.

    Raises:
        ValueError: If the response has no video details (e.g. unavailable video)
    """
    details = data.get("videoDetails")
    if not details:
        status = data.get("playabilityStatus", {})
        reason = status.get("reason") or status.get("status") or "no video details"
        raise ValueError(f"Video unavailable: {reason}")

    microformat = data.get("microformat", {}).get("playerMicroformatRenderer", {})
    streaming = data.get("streamingData", {})

    thumbnails = []
    for thumb in details.get("thumbnail", {}).get("thumbnails", []):
        url = thumb.get("url")
        if not url:
            continue
        thumbnails.append(
            Thumbnail(
                url=url,
                width=_to_int(thumb.get("width")) or 0,
                height=_to_int(thumb.get("height")) or 0,
                quality=thumbnail_quality(url),
            )
        )

    variants = []
    for fmt in streaming.get("formats", []) + streaming.get("adaptiveFormats", []):
        variant = _variant_from_format(fmt)
        if variant is not None:
            variants.append(variant)

    upload_date = microformat.get("uploadDate") or microformat.get("publishDate")
    if upload_date:
        upload_date = upload_date[:10]

    return VideoMetadata(
        video_id=details.get("videoId", ""),
        title=details.get("title", "Unknown Title"),
        duration=_to_int(details.get("lengthSeconds")) or 0,
        thumbnails=thumbnails,
        view_count=_to_int(details.get("viewCount") or microformat.get("viewCount")),
        upload_date=upload_date,
        is_live=bool(details.get("isLive")),
        variants=variants,
        source=source,
    )


def parse_watch_page(html: str, source: str = "relay") -> VideoMetadata:
    """Resolve VideoMetadata from raw watch-page HTML."""
    return metadata_from_player_response(extract_player_response(html), source=source)
