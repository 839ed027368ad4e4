# src/chat_vault/services/__init__.py
"""Business logic services for the Chat Vault application."""

from .blob_codec import MalformedBlobInput, decode_data_uri, encode_data_uri
from .share_tokens import (
    InvalidExpiry,
    ShareTokenService,
    TokenInvalid,
    get_share_token_service,
)

__all__ = [
    "MalformedBlobInput",
    "decode_data_uri",
    "encode_data_uri",
    "InvalidExpiry",
    "ShareTokenService",
    "TokenInvalid",
    "get_share_token_service",
]
