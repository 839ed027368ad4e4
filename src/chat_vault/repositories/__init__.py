"""Data access layer."""

from .chat_repo import SORT_KEYS, ChatRepository

__all__ = ["ChatRepository", "SORT_KEYS"]
