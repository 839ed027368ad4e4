"""Owner-scoped chat endpoints for the Chat Vault API."""

import logging
import math

from fastapi import APIRouter, HTTPException, Query, Request, Response, status

from chat_vault.api.v1.dependencies import ChatRepoDep, CurrentUserDep, ShareTokenServiceDep
from chat_vault.db import MAX_ROW_ID
from chat_vault.models import Chat
from chat_vault.repositories import SORT_KEYS
from chat_vault.schemas.chat import ChatCreate, ChatRename, ChatResponse, MessageResponse
from chat_vault.services.blob_codec import MalformedBlobInput, decode_data_uri
from chat_vault.services.share_tokens import InvalidExpiry

router = APIRouter(prefix="/chats", tags=["chats"])
logger = logging.getLogger(__name__)

SHARE_TOKEN_HEADER = "chat-token"


def _to_response(request: Request, chat: Chat) -> ChatResponse:
    return ChatResponse(
        blob_url=str(request.url_for("get_chat_blob", chat_id=chat.chat_id)),
        chat_id=chat.chat_id,
        user_id=chat.user_id,
        name=chat.name,
        mime_type=chat.mime_type,
        created_at=chat.created_at,
        updated_at=chat.updated_at,
    )


def _chat_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chat not found")


def _parse_positive_int(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        value = int(raw)
    except ValueError:
        return None
    return value if 0 < value <= MAX_ROW_ID else None


def build_link_header(request: Request, *, page: int, per_page: int, total: int) -> str:
    """Return an RFC 8288 ``Link`` value with prev/next pages.

    ``prev`` is present iff ``page > 1``; ``next`` iff ``page < ceil(total / per_page)``.
    """
    total_pages = math.ceil(total / per_page)
    links: list[str] = []
    if page > 1:
        url = request.url.include_query_params(page=page - 1, perPage=per_page)
        links.append(f'<{url}>; rel="prev"')
    if page < total_pages:
        url = request.url.include_query_params(page=page + 1, perPage=per_page)
        links.append(f'<{url}>; rel="next"')
    return ", ".join(links)


@router.post("", response_model=ChatResponse)
async def create_chat(
    payload: ChatCreate,
    request: Request,
    current_user: CurrentUserDep,
    repo: ChatRepoDep,
) -> ChatResponse:
    """Store a new chat decoded from a base64 data URI.

    Raises:
        HTTPException: 400 if the data URI cannot be decoded.
    """
    try:
        mime_type, data = decode_data_uri(payload.base64)
    except MalformedBlobInput as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(err),
        ) from err

    chat = repo.create(
        user_id=current_user.user_id,
        mime_type=mime_type,
        data=data,
        name=payload.name,
    )
    logger.info(
        "Created chat %s for user %s (%s, %d bytes)",
        chat.chat_id,
        current_user.user_id,
        mime_type,
        len(data),
    )
    return _to_response(request, chat)


@router.get("", response_model=list[ChatResponse])
async def list_chats(
    request: Request,
    response: Response,
    current_user: CurrentUserDep,
    repo: ChatRepoDep,
    page: str | None = Query(None, description="1-based page number"),
    per_page: str | None = Query(None, alias="perPage", description="Page size"),
    sort_by: str | None = Query(None, alias="sortBy", description="name, createdAt or updatedAt"),
) -> list[ChatResponse]:
    """List the caller's chats one page at a time.

    Sets a ``Link`` header with ``prev``/``next`` pages and ``X-Total-Count``.

    Raises:
        HTTPException: 400 for missing or invalid paging or sort parameters.
    """
    page_number = _parse_positive_int(page)
    page_size = _parse_positive_int(per_page)
    if page_number is None or page_size is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid perPage or page",
        )
    if sort_by not in SORT_KEYS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="sortBy should be name, createdAt or updatedAt",
        )

    chats, total = repo.list_chats(
        current_user.user_id,
        page=page_number,
        per_page=page_size,
        sort_by=sort_by,
    )

    link = build_link_header(request, page=page_number, per_page=page_size, total=total)
    if link:
        response.headers["Link"] = link
    response.headers["X-Total-Count"] = str(total)
    return [_to_response(request, chat) for chat in chats]


@router.get("/{chat_id}", response_model=ChatResponse)
async def get_chat(
    chat_id: int,
    request: Request,
    current_user: CurrentUserDep,
    repo: ChatRepoDep,
) -> ChatResponse:
    """Return metadata for one of the caller's chats."""
    chat = repo.get_by_id(current_user.user_id, chat_id)
    if chat is None:
        raise _chat_not_found()
    return _to_response(request, chat)


@router.patch("/{chat_id}", response_model=ChatResponse)
async def rename_chat(
    chat_id: int,
    payload: ChatRename,
    request: Request,
    current_user: CurrentUserDep,
    repo: ChatRepoDep,
) -> ChatResponse:
    """Rename one of the caller's chats."""
    chat = repo.rename(current_user.user_id, chat_id, payload.name)
    if chat is None:
        raise _chat_not_found()
    return _to_response(request, chat)


@router.delete("/{chat_id}", response_model=MessageResponse)
async def delete_chat(
    chat_id: int,
    current_user: CurrentUserDep,
    repo: ChatRepoDep,
) -> MessageResponse:
    """Delete one of the caller's chats along with its blob."""
    if not repo.delete(current_user.user_id, chat_id):
        raise _chat_not_found()
    logger.info("Deleted chat %s for user %s", chat_id, current_user.user_id)
    return MessageResponse()


@router.get("/{chat_id}/blob", name="get_chat_blob")
async def get_chat_blob(
    chat_id: int,
    current_user: CurrentUserDep,
    repo: ChatRepoDep,
) -> Response:
    """Return the raw payload with its stored MIME type."""
    chat = repo.get_by_id(current_user.user_id, chat_id, include_data=True)
    if chat is None:
        raise _chat_not_found()
    # Stored MIME type goes out verbatim, with no charset added.
    return Response(content=chat.data, headers={"Content-Type": chat.mime_type})


@router.get("/{chat_id}/token", response_model=MessageResponse)
async def issue_share_token(
    chat_id: int,
    response: Response,
    current_user: CurrentUserDep,
    repo: ChatRepoDep,
    share_tokens: ShareTokenServiceDep,
    expires_in: str | None = Query(None, alias="expiresIn", description="e.g. 30d, 12h, 90m"),
) -> MessageResponse:
    """Issue a share token for one of the caller's chats.

    The token is returned in the ``chat-token`` response header.

    Raises:
        HTTPException: 404 if the chat is not the caller's, 400 for a bad ``expiresIn``.
    """
    if not repo.exists_for_user(current_user.user_id, chat_id):
        raise _chat_not_found()

    try:
        token = share_tokens.issue(chat_id, expires_in)
    except InvalidExpiry as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid expiresIn",
        ) from err

    logger.info(
        "Issued share token for chat %s (expiresIn=%s)",
        chat_id,
        expires_in or "default",
    )
    response.headers[SHARE_TOKEN_HEADER] = token
    return MessageResponse()
