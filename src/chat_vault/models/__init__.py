# src/chat_vault/models/__init__.py
"""SQLAlchemy models for the Chat Vault application."""

from .chat import Chat
from .user import User

__all__ = ["Chat", "User"]
