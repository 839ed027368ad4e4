"""Share-token endpoints: read access to a single chat without an account."""

from fastapi import APIRouter, HTTPException, Request, Response, status

from chat_vault.api.v1.dependencies import ChatRepoDep, ShareTokenServiceDep
from chat_vault.models import Chat
from chat_vault.schemas.chat import SharedChatResponse
from chat_vault.services.share_tokens import ShareTokenService, TokenInvalid

router = APIRouter(prefix="/shared", tags=["shared"])


def _verified_chat_id(share_tokens: ShareTokenService, token: str) -> int:
    try:
        return share_tokens.verify(token).chat_id
    except TokenInvalid as err:
        raise HTTPException(status_code=status.HTTP_410_GONE, detail=str(err)) from err


def _require_chat(chat: Chat | None) -> Chat:
    if chat is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chat not found")
    return chat


@router.get("/{token}", response_model=SharedChatResponse)
async def get_shared_chat(
    token: str,
    request: Request,
    repo: ChatRepoDep,
    share_tokens: ShareTokenServiceDep,
) -> SharedChatResponse:
    """Return metadata for a shared chat. The owner's label is not exposed."""
    chat_id = _verified_chat_id(share_tokens, token)
    chat = _require_chat(repo.get_shared(chat_id))
    return SharedChatResponse(
        blob_url=str(request.url_for("get_shared_blob", token=token)),
        chat_id=chat.chat_id,
        user_id=chat.user_id,
        mime_type=chat.mime_type,
        created_at=chat.created_at,
        updated_at=chat.updated_at,
    )


@router.get("/{token}/blob", name="get_shared_blob")
async def get_shared_blob(
    token: str,
    repo: ChatRepoDep,
    share_tokens: ShareTokenServiceDep,
) -> Response:
    """Return the raw payload of a shared chat."""
    chat_id = _verified_chat_id(share_tokens, token)
    chat = _require_chat(repo.get_shared(chat_id, include_data=True))
    # Stored MIME type goes out verbatim, with no charset added.
    return Response(content=chat.data, headers={"Content-Type": chat.mime_type})
