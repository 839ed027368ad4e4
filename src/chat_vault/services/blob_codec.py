"""Data-URI codec for uploaded chat blobs."""

from __future__ import annotations

import base64
import binascii
import re

__all__ = ["MalformedBlobInput", "decode_data_uri", "encode_data_uri"]

# ``data:<type>/<subtype>[;param...];base64,<payload>``
_DATA_URI_RE = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)(?P<params>(?:;[^,;]*)*),(?P<payload>.*)$",
    re.DOTALL,
)


class MalformedBlobInput(ValueError):
    """Raised when an uploaded value is not a decodable base64 data URI."""


def decode_data_uri(value: str) -> tuple[str, bytes]:
    """Split a data URI into its MIME type and decoded payload.

    Args:
        value: String such as ``data:text/plain;base64,aGVsbG8=``.

    Returns:
        ``(mime_type, raw_bytes)``.

    Raises:
        MalformedBlobInput: If the MIME segment or the ``;base64`` marker is
            missing, or the payload is not valid base64.
    """
    if not isinstance(value, str):
        raise MalformedBlobInput("Blob must be a data URI string")

    match = _DATA_URI_RE.match(value.strip())
    if match is None:
        raise MalformedBlobInput("Blob is missing a recognizable MIME type")
    if not match.group("params").lower().endswith(";base64"):
        raise MalformedBlobInput("Blob is not a base64 data URI")

    payload = re.sub(r"\s+", "", match.group("payload"))
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as err:
        raise MalformedBlobInput("Blob payload is not valid base64") from err
    return match.group("mime"), data


def encode_data_uri(mime_type: str, data: bytes) -> str:
    """Return ``data`` as a base64 data URI tagged with ``mime_type``."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"
