"""Signed, expiring capability tokens for sharing a single chat.

A share token is a JWT carrying only ``chatId`` plus ``iat``/``exp``. It holds no
user identity: anyone with the string can read that chat's metadata and blob
until the token expires or the chat is deleted. Nothing is stored server side,
so there is no revocation.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import lru_cache

from jose import JWTError, jwt

from chat_vault.core.settings import settings

__all__ = [
    "InvalidExpiry",
    "ShareTokenError",
    "ShareTokenService",
    "SharedChatClaims",
    "TokenInvalid",
    "get_share_token_service",
    "parse_duration",
]

logger = logging.getLogger(__name__)

_DURATION_RE = re.compile(
    r"^(?P<value>-?(?:\d+)?\.?\d+) *"
    r"(?P<unit>milliseconds?|msecs?|ms|seconds?|secs?|s|minutes?|mins?|m|"
    r"hours?|hrs?|h|days?|d|weeks?|w|years?|yrs?|y)?$",
    re.IGNORECASE,
)

# Unit -> (timedelta keyword, multiplier)
_UNITS: dict[str, tuple[str, float]] = {
    "ms": ("milliseconds", 1),
    "s": ("seconds", 1),
    "m": ("minutes", 1),
    "h": ("hours", 1),
    "d": ("days", 1),
    "w": ("weeks", 1),
    "y": ("days", 365.25),
}


class ShareTokenError(RuntimeError):
    """Base exception raised by the share-token service."""


class InvalidExpiry(ShareTokenError):
    """Raised when a requested token lifetime cannot be interpreted."""


class TokenInvalid(ShareTokenError):
    """Raised for any token that fails verification.

    Expired, tampered and malformed tokens are deliberately indistinguishable.
    """


@dataclass(frozen=True)
class SharedChatClaims:
    """Verified contents of a share token."""

    chat_id: int
    expires_at: datetime


def _unit_key(unit: str | None) -> str:
    if unit is None:
        return "ms"
    unit = unit.lower()
    if unit.startswith(("ms", "msec", "milli")):
        return "ms"
    if unit in {"y", "yr", "yrs", "year", "years"}:
        return "y"
    return unit[0]


def parse_duration(value: str) -> timedelta:
    """Parse a human duration such as ``"30d"``, ``"2 hours"`` or ``"-1s"``.

    A bare number is read as milliseconds.

    Raises:
        InvalidExpiry: If ``value`` is not a string in a recognised format.
    """
    if not isinstance(value, str) or not value.strip() or len(value) > 100:
        raise InvalidExpiry("Invalid expiresIn")
    match = _DURATION_RE.match(value.strip())
    if match is None:
        raise InvalidExpiry("Invalid expiresIn")
    amount = float(match.group("value"))
    keyword, multiplier = _UNITS[_unit_key(match.group("unit"))]
    try:
        return timedelta(**{keyword: amount * multiplier})
    except OverflowError as err:
        raise InvalidExpiry("Invalid expiresIn") from err


class ShareTokenService:
    """Issue and verify share tokens with an explicitly injected secret."""

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        default_ttl: str | timedelta = "30d",
    ) -> None:
        if not secret:
            raise ValueError("A signing secret is required for share tokens")
        self._secret = secret
        self._algorithm = algorithm
        self._default_ttl = self._resolve_ttl(default_ttl)

    @staticmethod
    def _resolve_ttl(ttl: str | timedelta) -> timedelta:
        if isinstance(ttl, timedelta):
            return ttl
        if isinstance(ttl, str):
            return parse_duration(ttl)
        raise InvalidExpiry("Invalid expiresIn")

    def issue(self, chat_id: int, ttl: str | timedelta | None = None) -> str:
        """Return a signed token granting read access to ``chat_id``.

        Args:
            chat_id: Chat the token unlocks.
            ttl: Lifetime as a duration string or ``timedelta``; ``None`` uses the
                configured default.

        Raises:
            InvalidExpiry: If ``ttl`` cannot be interpreted.
        """
        lifetime = self._default_ttl if ttl is None else self._resolve_ttl(ttl)
        now = datetime.now(UTC)
        try:
            expires_at = now + lifetime
        except OverflowError as err:
            raise InvalidExpiry("Invalid expiresIn") from err
        claims = {
            "chatId": chat_id,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token: str = jwt.encode(claims, self._secret, algorithm=self._algorithm)
        return token

    def verify(self, token: str) -> SharedChatClaims:
        """Validate ``token`` and return its claims.

        Raises:
            TokenInvalid: On a bad signature, malformed payload or expiry.
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as err:
            logger.info("Rejected share token: %s", err.__class__.__name__)
            raise TokenInvalid("Share link is invalid or has expired") from err

        chat_id = payload.get("chatId")
        exp = payload.get("exp")
        if not isinstance(chat_id, int) or isinstance(chat_id, bool) or not isinstance(exp, int):
            logger.info("Rejected share token: malformed claims")
            raise TokenInvalid("Share link is invalid or has expired")
        return SharedChatClaims(
            chat_id=chat_id,
            expires_at=datetime.fromtimestamp(exp, UTC),
        )


@lru_cache(maxsize=1)
def get_share_token_service() -> ShareTokenService:
    """Return the process-wide share-token service built from settings."""
    return ShareTokenService(
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
        default_ttl=settings.share_token_default_ttl,
    )
