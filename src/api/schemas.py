"""Pydantic request/response models for the vidgrab API."""

from pydantic import BaseModel, Field

# =============================================================================
# Response Models
# =============================================================================


class RootResponse(BaseModel):
    """Root endpoint response."""

    message: str
    version: str

    model_config = {"json_schema_extra": {"examples": [{"message": "vidgrab API", "version": "1.0.0"}]}}


class HealthResponse(BaseModel):
    """Health check response."""

    status: str

    model_config = {"json_schema_extra": {"examples": [{"status": "healthy"}]}}


class FormatCapabilities(BaseModel):
    """Which stream categories a video offers."""

    audio: bool
    video: bool
    combined: bool


class InfoResponse(BaseModel):
    """Video info response."""

    title: str
    thumbnail: str
    duration: str
    durationSeconds: int
    views: str
    videoId: str
    isLive: bool
    uploadDate: str | None = None
    formats: FormatCapabilities

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "title": "Rick Astley - Never Gonna Give You Up (Official Music Video)",
                    "thumbnail": "https://i.ytimg.com/vi/dQw4w9WgXcQ/maxresdefault.jpg",
                    "duration": "3:33",
                    "durationSeconds": 213,
                    "views": "1,500,000,000",
                    "videoId": "dQw4w9WgXcQ",
                    "isLive": False,
                    "uploadDate": "2009-10-25",
                    "formats": {"audio": True, "video": True, "combined": True},
                }
            ]
        }
    }


class DownloadResponse(BaseModel):
    """Pass-through download response (direct stream URL)."""

    url: str
    title: str
    thumbnail: str
    duration: str
    type: str
    size: int | None = None
    quality: str | None = Field(default=None, description="Video quality label (mp4)")
    bitrate: int | None = Field(default=None, description="Audio bitrate in kbps (mp3)")


class ErrorResponse(BaseModel):
    """Error response for the info handler and input validation."""

    error: str
    details: str | None = None
    example: str | None = None
    received: str | None = None
    validExamples: list[str] | None = None


class DownloadErrorResponse(BaseModel):
    """Error response for download failures."""

    error: str
    details: str
    solutions: list[str]


class CacheStatsResponse(BaseModel):
    """Response cache statistics."""

    enabled: bool
    total_requests: int
    hits: int
    misses: int
    evictions: int
    hit_rate: float
    entry_count: int
    capacity: int
    ttl_ms: int
