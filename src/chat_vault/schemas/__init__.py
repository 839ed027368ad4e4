# src/chat_vault/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .chat import ChatCreate, ChatRename, ChatResponse, MessageResponse, SharedChatResponse
from .user import LoginRequest, LoginResponse, RegisterRequest, RegisterResponse

__all__ = [
    "ChatCreate", "ChatRename", "ChatResponse", "MessageResponse", "SharedChatResponse",
    "LoginRequest", "LoginResponse", "RegisterRequest", "RegisterResponse",
]
