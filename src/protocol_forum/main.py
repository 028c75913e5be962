# src/protocol_forum/main.py
"""Main entry point for the Protocol Forum application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from protocol_forum.api.v1 import (
    comments_router,
    profile_router,
    protocols_router,
    replies_router,
    reviews_router,
    votes_router,
)
from protocol_forum.core.errors import ForumError
from protocol_forum.core.settings import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Threaded discussion API for protocols",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(protocols_router, prefix="/api/v1")
app.include_router(comments_router, prefix="/api/v1")
app.include_router(replies_router, prefix="/api/v1")
app.include_router(reviews_router, prefix="/api/v1")
app.include_router(votes_router, prefix="/api/v1")
app.include_router(profile_router, prefix="/api/v1")


@app.exception_handler(ForumError)
async def forum_error_handler(request: Request, exc: ForumError) -> JSONResponse:
    """Translate domain errors into the standard ``{"detail": ...}`` envelope."""
    logger.info("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Threaded discussion API for protocols",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("protocol_forum.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
