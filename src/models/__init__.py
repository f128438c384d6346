# Data models for vidgrab
from .video import (
    CacheEntry,
    OutputFormat,
    RequestOptions,
    StreamKind,
    StreamVariant,
    Thumbnail,
    VideoMetadata,
    VideoRef,
)
from .errors import (
    InvalidUrl,
    NoMatchingFormat,
    ResolutionFailed,
    TransportError,
    VideoFetchError,
)

__all__ = [
    "CacheEntry",
    "OutputFormat",
    "RequestOptions",
    "StreamKind",
    "StreamVariant",
    "Thumbnail",
    "VideoMetadata",
    "VideoRef",
    "InvalidUrl",
    "NoMatchingFormat",
    "ResolutionFailed",
    "TransportError",
    "VideoFetchError",
]
