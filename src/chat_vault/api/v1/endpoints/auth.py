"""Account endpoints: registration and password login."""

import logging

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select

from chat_vault.api.v1.dependencies import SessionDep
from chat_vault.core.security import create_access_token, hash_password, verify_password
from chat_vault.models import User
from chat_vault.schemas.user import LoginRequest, LoginResponse, RegisterRequest, RegisterResponse

router = APIRouter(prefix="/auth", tags=["authentication"])
logger = logging.getLogger(__name__)


@router.post(
    "/register",
    summary="Register a new account",
    status_code=status.HTTP_201_CREATED,
    response_model=RegisterResponse,
)
async def register_user(payload: RegisterRequest, db: SessionDep) -> RegisterResponse:
    """Create an account for ``payload.username``.

    Raises:
        HTTPException: 409 if the username is already taken.
    """
    existing = db.scalar(select(User.user_id).where(User.username == payload.username))
    if existing is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username already exists",
        )

    user = User(username=payload.username, password_hash=hash_password(payload.password))
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.user_id)
    return RegisterResponse.model_validate(user)


@router.post(
    "/login",
    summary="Exchange a username and password for a bearer token",
    response_model=LoginResponse,
)
async def login_user(payload: LoginRequest, db: SessionDep) -> LoginResponse:
    """Authenticate with a password and return the primary access token."""
    user = db.scalars(select(User).where(User.username == payload.username)).first()
    if user is None or not verify_password(payload.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    return LoginResponse(access_token=create_access_token(user.user_id))
