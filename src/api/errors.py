"""Mapping of pipeline errors to HTTP responses."""

from typing import Optional

from fastapi.responses import JSONResponse

from models.errors import (
    InvalidUrl,
    NoMatchingFormat,
    ResolutionFailed,
    TransportError,
    VideoFetchError,
)
from services.url_normalizer import VALID_EXAMPLES

STATUS_CODES: dict[type, int] = {
    InvalidUrl: 400,
    NoMatchingFormat: 404,
    ResolutionFailed: 500,
    TransportError: 500,
}

DOWNLOAD_SOLUTIONS = [
    "Try a lower quality setting",
    "Try again in 5 minutes",
    "Check if video is age-restricted",
]

EXAMPLE_QUERY = "?url=https://youtu.be/dQw4w9WgXcQ&format=mp4"

CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}
DOWNLOAD_HEADERS = {**CORS_HEADERS, "Cache-Control": "public, max-age=300"}


def status_for(exc: VideoFetchError) -> int:
    """HTTP status for a pipeline error; unknown subclasses map to 500."""
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 500


def json_response(status_code: int, content: dict, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content, headers=headers or CORS_HEADERS)


def invalid_url_body(exc: InvalidUrl) -> dict:
    """400 body: missing URL gets an example, a bad URL gets valid spellings."""
    if exc.received is None or not exc.received.strip():
        return {"error": "URL parameter is required", "example": EXAMPLE_QUERY}
    return {
        "error": exc.message,
        "received": exc.received,
        "validExamples": VALID_EXAMPLES,
    }


def info_error_response(exc: VideoFetchError) -> JSONResponse:
    status_code = status_for(exc)
    if isinstance(exc, InvalidUrl):
        return json_response(status_code, invalid_url_body(exc))
    return json_response(status_code, {"error": exc.message, "details": exc.details})


def download_error_response(exc: VideoFetchError) -> JSONResponse:
    status_code = status_for(exc)
    if isinstance(exc, InvalidUrl):
        return json_response(status_code, invalid_url_body(exc), DOWNLOAD_HEADERS)
    return json_response(
        status_code,
        {
            "error": "Download failed",
            "details": exc.message if exc.details == exc.message else f"{exc.message}: {exc.details}",
            "solutions": DOWNLOAD_SOLUTIONS,
        },
        DOWNLOAD_HEADERS,
    )
