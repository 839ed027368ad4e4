# src/chat_vault/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .auth import router as auth_router
from .chats import router as chats_router
from .shared import router as shared_router

__all__ = [
    "auth_router",
    "chats_router",
    "shared_router",
]
