"""Video info and download routes for the vidgrab API."""

import logging
from urllib.parse import quote

from api.dependencies import get_response_cache, get_video_service
from api.errors import (
    CORS_HEADERS,
    DOWNLOAD_HEADERS,
    download_error_response,
    info_error_response,
    json_response,
)
from api.schemas import (
    CacheStatsResponse,
    DownloadErrorResponse,
    DownloadResponse,
    ErrorResponse,
    InfoResponse,
)
from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from models.errors import VideoFetchError
from models.video import OutputFormat
from services.video_service import VideoService
from utils.cache import ResponseCache

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Videos"])


@router.get(
    "/api/info",
    response_model=InfoResponse,
    summary="Video info",
    description="Resolve title, thumbnail, duration and available stream categories for a video URL.",
    responses={
        400: {"model": ErrorResponse, "description": "Missing or invalid URL"},
        500: {"model": ErrorResponse, "description": "Metadata could not be resolved"},
    },
)
async def get_info(
    url: str | None = Query(default=None, description="Video URL in any accepted form"),
    service: VideoService = Depends(get_video_service),
) -> Response:
    """Return the info payload for ``url``."""
    try:
        payload = await service.get_info(url)
    except VideoFetchError as e:
        logger.warning(f"Info request failed ({type(e).__name__}): {e.details}")
        return info_error_response(e)

    return json_response(200, payload, CORS_HEADERS)


@router.get(
    "/api/download",
    response_model=DownloadResponse,
    summary="Download",
    description=(
        "Select a stream for a video URL. Large streams are returned as a direct URL; "
        "smaller ones are returned as the media bytes."
    ),
    responses={
        200: {"content": {"application/octet-stream": {}}, "description": "Direct URL or media bytes"},
        400: {"model": ErrorResponse, "description": "Missing or invalid URL or format"},
        404: {"model": DownloadErrorResponse, "description": "No matching format"},
        500: {"model": DownloadErrorResponse, "description": "Download failed"},
    },
)
async def download(
    url: str | None = Query(default=None, description="Video URL in any accepted form"),
    format: str = Query(default="mp4", description="mp3 (audio only) or mp4 (video with audio)"),
    quality: str | None = Query(default=None, description="Quality label, format id, highest or lowest"),
    service: VideoService = Depends(get_video_service),
) -> Response:
    """Return the download payload or bytes for ``url``."""
    try:
        output_format = OutputFormat(format.lower())
    except ValueError:
        return json_response(
            400,
            {
                "error": "Invalid format",
                "received": format,
                "validFormats": [f.value for f in OutputFormat],
            },
            DOWNLOAD_HEADERS,
        )

    try:
        result = await service.prepare_download(url, output_format, quality or None)
    except VideoFetchError as e:
        logger.error(f"Download failed ({type(e).__name__}): {e.details}")
        return download_error_response(e)

    if result.is_materialized:
        return Response(
            content=result.content,
            media_type=result.media_type,
            headers={
                **DOWNLOAD_HEADERS,
                "Content-Disposition": f"attachment; filename*=UTF-8''{quote(result.filename)}",
            },
        )
    return json_response(200, result.payload, DOWNLOAD_HEADERS)


@router.get(
    "/api/cache/stats",
    response_model=CacheStatsResponse,
    summary="Cache statistics",
    description="Hit/miss counters and size of the response cache.",
)
async def cache_stats(cache: ResponseCache = Depends(get_response_cache)) -> dict:
    """Response cache statistics."""
    return cache.get_stats()
