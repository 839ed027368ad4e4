# src/chat_vault/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import auth_router, chats_router, shared_router

__all__ = [
    "auth_router",
    "chats_router",
    "shared_router",
]
