"""Chat-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ChatCreate(_CamelModel):
    """Schema for uploading a new chat blob."""

    base64: str = Field(..., description="Data URI of the form data:<mime>;base64,<payload>")
    name: str = Field(..., min_length=1, max_length=255, description="Label shown to the owner")

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be empty")
        return value


class ChatRename(_CamelModel):
    """Schema for renaming an existing chat."""

    name: str = Field(..., min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be empty")
        return value


class SharedChatResponse(_CamelModel):
    """Chat metadata visible to anyone holding a share token."""

    blob_url: str
    chat_id: int
    user_id: int
    mime_type: str
    created_at: datetime
    updated_at: datetime


class ChatResponse(SharedChatResponse):
    """Chat metadata returned to the owner."""

    name: str


class MessageResponse(BaseModel):
    """Plain acknowledgement body."""

    message: str = "ok"
