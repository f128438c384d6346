#!/usr/bin/env python
"""FastAPI server exposing the vidgrab info and download handlers."""

import sys
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

# Add src directory to Python path for imports
src_dir = Path(__file__).parent.parent
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.errors import CORS_HEADERS, DOWNLOAD_HEADERS, DOWNLOAD_SOLUTIONS
from api.routers import core, videos
from services.video_service import VideoService
from utils.config import load_config, validate_config
from utils.logging import (
    clear_request_context,
    get_logger,
    set_request_context,
    setup_logging,
)

logger = get_logger(__name__)

DOWNLOAD_PATH = "/api/download"


def create_app(service: VideoService | None = None, config: dict | None = None) -> FastAPI:
    """Build the application.

    Args:
        service: Pre-built VideoService (tests inject one with stub collaborators)
        config: Configuration dictionary (default: load_config())

    Returns:
        Configured FastAPI app
    """
    if config is None:
        config = load_config()
        setup_logging(config.get("log_level", "INFO"), json_output=config.get("log_json", False))

    errors = validate_config(config)
    if errors:
        raise ValueError(f"Invalid configuration: {'; '.join(errors)}")

    if service is None:
        service = VideoService.from_config(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("vidgrab API starting")
        yield
        await app.state.video_service.close()
        logger.info("vidgrab API stopped")

    app = FastAPI(title="vidgrab API", version=core.API_VERSION, lifespan=lifespan)
    app.state.video_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.get("cors_origins", ["*"]),
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        set_request_context(request_id)
        try:
            response = await call_next(request)
        finally:
            clear_request_context()
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
        if request.url.path == DOWNLOAD_PATH:
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Download failed",
                    "details": str(exc),
                    "solutions": DOWNLOAD_SOLUTIONS,
                },
                headers=DOWNLOAD_HEADERS,
            )
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "details": str(exc)},
            headers=CORS_HEADERS,
        )

    app.include_router(core.router)
    app.include_router(videos.router)

    return app


if __name__ == "__main__":
    import uvicorn

    app = create_app()
    uvicorn.run(app, host="0.0.0.0", port=load_config()["port"], log_level="info")
