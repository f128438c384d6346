"""Stream variant selection for the download handler."""

import logging
from typing import Callable, Optional, Sequence

from models.errors import NoMatchingFormat
from models.video import StreamKind, StreamVariant

logger = logging.getLogger(__name__)

# Selected variants larger than this are returned as a URL, never buffered
LARGE_FILE_THRESHOLD = 100_000_000

HIGHEST_QUALITIES = {"highest", "highestaudio", "highestvideo"}
LOWEST_QUALITIES = {"lowest", "lowestaudio", "lowestvideo"}

KIND_FILTERS: dict[StreamKind, Callable[[StreamVariant], bool]] = {
    StreamKind.AUDIO_ONLY: lambda v: v.is_audio_only,
    StreamKind.VIDEO_AND_AUDIO: lambda v: v.is_combined,
    StreamKind.VIDEO_ONLY: lambda v: v.has_video,
}


def audio_rank(variant: StreamVariant) -> tuple:
    return (variant.audio_bitrate or 0, variant.bitrate)


def video_rank(variant: StreamVariant) -> tuple:
    return (variant.height, variant.fps, variant.bitrate, variant.audio_bitrate or 0)


def filter_variants(variants: Sequence[StreamVariant], kind: StreamKind) -> list[StreamVariant]:
    """Variants acceptable for ``kind``, in platform order."""
    keep = KIND_FILTERS[kind]
    return [v for v in variants if keep(v)]


def select_format(
    variants: Sequence[StreamVariant],
    kind: StreamKind,
    quality: Optional[str] = None,
) -> StreamVariant:
    """Pick the best variant for ``kind`` under the requested quality.

    Args:
        variants: All variants, in the order the platform listed them
        kind: Stream categories the caller accepts
        quality: None or ``highest*`` for the best variant, ``lowest*`` for the
            worst, otherwise an exact quality label (``720p``) or format id

    Returns:
        The selected StreamVariant. When several rank equally, the one listed
        first wins.

    Raises:
        NoMatchingFormat: Nothing matches the kind or the requested quality
    """
    candidates = filter_variants(variants, kind)
    if not candidates:
        if kind is StreamKind.AUDIO_ONLY:
            raise NoMatchingFormat("No audio formats available")
        raise NoMatchingFormat("No matching video format found")

    rank = audio_rank if kind is StreamKind.AUDIO_ONLY else video_rank
    requested = (quality or "").strip()
    lowered = requested.lower()

    # max()/min() return the first of equal elements, which keeps platform order
    if not requested or lowered in HIGHEST_QUALITIES:
        return max(candidates, key=rank)
    if lowered in LOWEST_QUALITIES:
        return min(candidates, key=rank)

    for variant in candidates:
        if requested in quality_names(variant):
            return variant

    logger.info(f"No {kind.value} variant with quality {requested!r}")
    raise NoMatchingFormat(
        f"No {kind.value} format with quality '{requested}'",
        details=f"Available: {', '.join(available_qualities(candidates)) or 'none'}",
    )


def quality_names(variant: StreamVariant) -> set[str]:
    """Every name a caller may use to request this exact variant."""
    names = {n for n in (variant.quality_label, variant.format_id) if n}
    if variant.audio_bitrate:
        names.add(f"{variant.audio_bitrate}kbps")
    return names


def available_qualities(variants: Sequence[StreamVariant]) -> list[str]:
    """Distinct quality labels (or format ids) in platform order."""
    seen: list[str] = []
    for v in variants:
        label = v.quality_label or (f"{v.audio_bitrate}kbps" if v.audio_bitrate else v.format_id)
        if label and label not in seen:
            seen.append(label)
    return seen


def is_large(variant: StreamVariant, threshold: int = LARGE_FILE_THRESHOLD) -> bool:
    """True when the variant must be passed through as a URL.

    Unknown content length counts as large.
    """
    if variant.content_length is None:
        return True
    return variant.content_length > threshold


def summarize_capabilities(variants: Sequence[StreamVariant]) -> dict[str, bool]:
    """Which stream categories exist at all, without selecting anything."""
    return {
        "audio": any(v.is_audio_only for v in variants),
        "video": any(v.is_video_only for v in variants),
        "combined": any(v.is_combined for v in variants),
    }
