"""Conversions between in-memory file payloads and raw bytes.

Binary payloads may travel as ``str``; such strings hold base64 text.
"""

from __future__ import annotations

import base64
import binascii

from retro_build.types import FileContent


def decode_base64_text(text: str) -> bytes:
    """Decode base64 text, ignoring embedded whitespace.

    Raises
    ------
    ValueError
        If ``text`` is not valid base64.
    """
    try:
        return base64.b64decode("".join(text.split()), validate=True)
    except binascii.Error as exc:
        raise ValueError(f"invalid base64 payload: {exc}") from exc


def content_bytes(content: FileContent, *, binary_data: bool = False) -> bytes:
    """Return the raw bytes of a payload.

    Strings are base64-decoded when ``binary_data`` is set and UTF-8
    encoded otherwise; byte buffers are returned as-is.
    """
    if isinstance(content, str):
        if binary_data:
            return decode_base64_text(content)
        return content.encode("utf-8")
    return bytes(content)
