"""Service dependency injection for the vidgrab API."""

from fastapi import Request

from services.video_service import VideoService
from utils.cache import ResponseCache


def get_video_service(request: Request) -> VideoService:
    """Get the service instance owned by the application."""
    return request.app.state.video_service


def get_response_cache(request: Request) -> ResponseCache:
    """Get the response cache shared by all handlers."""
    return request.app.state.video_service.cache
