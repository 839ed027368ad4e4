# src/chat_vault/main.py
"""Main entry point for the Chat Vault application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from chat_vault.api.v1 import auth_router, chats_router, shared_router
from chat_vault.core.logging import configure_logging
from chat_vault.core.settings import settings
from chat_vault.services.share_tokens import get_share_token_service

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Chat Vault API",
    description="Store, list and share exported chat blobs",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
    expose_headers=settings.cors_expose_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(chats_router, prefix="/api/v1")
app.include_router(shared_router, prefix="/api/v1")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed requests as 400 Bad Request."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging(settings.log_level)
    # Fail at boot rather than on the first share request if signing is misconfigured.
    get_share_token_service()
    logger.info("%s %s started", settings.app_name, settings.app_version)


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
        "description": "Store, list and share exported chat blobs",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("chat_vault.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
