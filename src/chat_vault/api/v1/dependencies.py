"""Shared API dependencies for authentication and common functionality."""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from chat_vault.core.settings import settings
from chat_vault.db.session import MAX_ROW_ID, get_db
from chat_vault.models import User
from chat_vault.repositories import ChatRepository
from chat_vault.services.share_tokens import ShareTokenService, get_share_token_service

# Missing credentials are reported by get_current_user, not by the scheme.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


@dataclass(frozen=True)
class AuthResult:
    """Outcome of resolving the primary bearer credential.

    Exactly one of ``user_id`` and ``rejection`` is set.
    """

    user_id: int | None = None
    rejection: str | None = None

    @property
    def ok(self) -> bool:
        return self.user_id is not None


def authenticate(credentials: HTTPAuthorizationCredentials | None) -> AuthResult:
    """Resolve a bearer credential to a user id without touching the database.

    Args:
        credentials: Parsed ``Authorization`` header, if any.

    Returns:
        AuthResult carrying either a positive user id or the rejection reason.
    """
    if credentials is None or not credentials.credentials:
        return AuthResult(rejection="missing credentials")
    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return AuthResult(rejection="invalid token")

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        return AuthResult(rejection="invalid subject")
    if user_id <= 0:
        return AuthResult(rejection="invalid subject")
    return AuthResult(user_id=user_id)


def get_auth_result(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> AuthResult:
    """Dependency wrapper around :func:`authenticate`."""
    return authenticate(credentials)


def get_current_user(
    auth: Annotated[AuthResult, Depends(get_auth_result)],
    db: SessionDep,
) -> User:
    """Get the current authenticated user.

    The credential is checked before the user row so that a bad token always
    yields 403 and only a valid token for a vanished account yields 404.

    Raises:
        HTTPException: 403 if the credential is unusable, 404 if the user is gone.
    """
    if not auth.ok:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not a valid token",
        )
    user = db.get(User, auth.user_id) if auth.user_id <= MAX_ROW_ID else None
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


def get_chat_repository(db: SessionDep) -> ChatRepository:
    """Return a repository bound to the request's session."""
    return ChatRepository(db)


def get_share_token_service_dep() -> ShareTokenService:
    """Return the shared share-token service."""
    return get_share_token_service()


# Type aliases for common dependencies
CurrentUserDep = Annotated[User, Depends(get_current_user)]
ChatRepoDep = Annotated[ChatRepository, Depends(get_chat_repository)]
ShareTokenServiceDep = Annotated[ShareTokenService, Depends(get_share_token_service_dep)]
