"""Account-related Pydantic schemas."""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class Credentials(BaseModel):
    """Username/password pair used by register and login."""

    username: str = Field(..., min_length=3, max_length=64)
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("username")
    @classmethod
    def _validate_username(cls, value: str) -> str:
        value = value.strip()
        if not _USERNAME_RE.match(value):
            raise ValueError("username may only contain letters, digits, '.', '_' and '-'")
        return value


class RegisterRequest(Credentials):
    """Schema for account registration."""


class LoginRequest(Credentials):
    """Schema for password login."""


class RegisterResponse(BaseModel):
    """Registration response containing the new account identifier."""

    user_id: int
    username: str

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class LoginResponse(BaseModel):
    """Bearer credential returned after a successful login."""

    access_token: str
    token_type: str = "bearer"
