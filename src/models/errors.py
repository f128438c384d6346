"""Error types raised by the resolution pipeline.

The pipeline raises these and never builds HTTP responses itself; the API
layer maps each class to a status code.
"""

from typing import Optional

# Upstream phrasings for a video that does not exist or was removed
UNAVAILABLE_PHRASES = (
    "video unavailable",
    "this video does not exist",
    "this video has been removed",
    "this video is no longer available",
)


class VideoFetchError(Exception):
    """Base class for every pipeline error."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details if details is not None else message


class InvalidUrl(VideoFetchError):
    """Input is missing, unparseable, or not a recognised video URL."""

    def __init__(self, received: Optional[str] = None, message: str = "Invalid YouTube URL"):
        super().__init__(message)
        self.received = received


class NoMatchingFormat(VideoFetchError):
    """No stream variant satisfies the requested kind or quality."""

    pass


class TransportError(VideoFetchError):
    """The relay or media transport itself failed."""

    pass


class ResolutionFailed(VideoFetchError):
    """Every fetch strategy was exhausted.

    ``details`` holds the message of the last underlying failure.
    """

    def __init__(self, details: str, message: Optional[str] = None):
        super().__init__(message or friendly_message(details), details=details)


def friendly_message(details: str, default: str = "Failed to fetch video info") -> str:
    """Turn a raw upstream error into a short user-facing message."""
    lowered = (details or "").lower()
    if "private video" in lowered:
        return "This video is private"
    if any(phrase in lowered for phrase in UNAVAILABLE_PHRASES):
        return "Video not found"
    return default
