"""Data access helpers for working with chats."""
from __future__ import annotations

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, undefer

from chat_vault.db.session import MAX_ROW_ID
from chat_vault.db.time import utcnow
from chat_vault.models.chat import Chat

__all__ = ["ChatRepository", "SORT_KEYS"]

# Public sort key -> (column, descending). Only these columns ever reach ORDER BY.
_SORT_COLUMNS = {
    "name": (Chat.name, False),
    "createdAt": (Chat.created_at, False),
    "updatedAt": (Chat.updated_at, True),
}
SORT_KEYS: tuple[str, ...] = tuple(_SORT_COLUMNS)


def _storable(chat_id: int) -> bool:
    return 0 < chat_id <= MAX_ROW_ID


class ChatRepository:
    """Thin wrapper around database access for chat entities.

    Every owner-scoped method filters on ``user_id`` inside the query itself, so
    another user's chat is indistinguishable from a missing one.
    """

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def create(self, *, user_id: int, mime_type: str, data: bytes, name: str) -> Chat:
        """Insert a new chat and return the persisted ORM instance."""
        chat = Chat(user_id=user_id, mime_type=mime_type, data=data, name=name)
        self.session.add(chat)
        self.session.commit()
        self.session.refresh(chat)
        return chat

    def list_chats(
        self,
        user_id: int,
        *,
        page: int,
        per_page: int,
        sort_by: str,
    ) -> tuple[list[Chat], int]:
        """Return one page of a user's chats and the user's total chat count.

        Args:
            user_id: Owner whose chats are listed.
            page: 1-based page number.
            per_page: Page size.
            sort_by: One of ``SORT_KEYS``; ``updatedAt`` sorts newest first, the
                others ascending.

        Raises:
            ValueError: If ``sort_by`` is unknown or paging values are not positive.
        """
        if sort_by not in _SORT_COLUMNS:
            raise ValueError(f"Unsupported sort key: {sort_by!r}")
        if page < 1 or per_page < 1:
            raise ValueError("page and per_page must be positive")

        offset = per_page * (page - 1)
        column, descending = _SORT_COLUMNS[sort_by]
        stmt = (
            select(Chat)
            .where(Chat.user_id == user_id)
            .order_by(column.desc() if descending else column.asc(), Chat.chat_id.asc())
            .offset(offset)
            .limit(min(per_page, MAX_ROW_ID))
        )
        # No table holds more rows than the key range, so such a page is empty.
        items = list(self.session.scalars(stmt)) if offset <= MAX_ROW_ID else []
        total = self.session.scalar(
            select(func.count()).select_from(Chat).where(Chat.user_id == user_id)
        )
        return items, int(total or 0)

    def get_by_id(self, user_id: int, chat_id: int, *, include_data: bool = False) -> Chat | None:
        """Return a chat owned by ``user_id``; the payload only when requested."""
        if not _storable(chat_id):
            return None
        stmt = select(Chat).where(Chat.chat_id == chat_id, Chat.user_id == user_id)
        if include_data:
            stmt = stmt.options(undefer(Chat.data))
        return self.session.scalars(stmt).first()

    def get_shared(self, chat_id: int, *, include_data: bool = False) -> Chat | None:
        """Return a chat by id without an ownership predicate.

        Only call this after a share token for ``chat_id`` has been verified.
        """
        if not _storable(chat_id):
            return None
        stmt = select(Chat).where(Chat.chat_id == chat_id)
        if include_data:
            stmt = stmt.options(undefer(Chat.data))
        return self.session.scalars(stmt).first()

    def rename(self, user_id: int, chat_id: int, name: str) -> Chat | None:
        """Rename a chat; return None when no chat matches ``(user_id, chat_id)``."""
        if not _storable(chat_id):
            return None
        result = self.session.execute(
            update(Chat)
            .where(Chat.chat_id == chat_id, Chat.user_id == user_id)
            .values(name=name, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self.session.rollback()
            return None
        self.session.commit()
        stmt = (
            select(Chat)
            .where(Chat.chat_id == chat_id, Chat.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return self.session.scalars(stmt).first()

    def delete(self, user_id: int, chat_id: int) -> bool:
        """Delete a chat and its payload; return False if nothing matched."""
        chat = self.get_by_id(user_id, chat_id)
        if chat is None:
            return False
        self.session.delete(chat)
        self.session.commit()
        return True

    def exists_for_user(self, user_id: int, chat_id: int) -> bool:
        """Return True if ``chat_id`` exists and belongs to ``user_id``."""
        if not _storable(chat_id):
            return False
        stmt = select(Chat.chat_id).where(Chat.chat_id == chat_id, Chat.user_id == user_id)
        return self.session.scalar(stmt) is not None
