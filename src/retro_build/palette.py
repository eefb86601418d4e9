"""Palette codecs: JASC/GIMP text, Photoshop swatches and Adobe Color Tables."""

from __future__ import annotations

import colorsys
import re
import struct
from collections.abc import Sequence
from typing import TypeAlias

from retro_build.content import content_bytes, decode_base64_text
from retro_build.errors import PaletteFormatError
from retro_build.types import FileContent

RGB: TypeAlias = tuple[int, int, int]

ACT_COLOR_SLOTS = 256
ACT_SIZE = ACT_COLOR_SLOTS * 3 + 4

_ACO_RGB = 0
_ACO_HSB = 1
_ACO_GRAYSCALE = 8
_TEXT_HEADERS = ("GIMP", "JASC")
_BASE64_PREFIX = re.compile(r"^[A-Za-z0-9+/=\r\n]+$")


def _as_bytes(content: FileContent) -> bytes:
    try:
        return content_bytes(content, binary_data=True)
    except ValueError as exc:
        raise PaletteFormatError(f"Binary palette is not valid base64: {exc}") from exc


def _unwrap_base64_text(text: str) -> str:
    """Return the decoded palette when ``text`` is a base64-wrapped text palette."""
    if text.lstrip("\ufeff").startswith(_TEXT_HEADERS):
        return text
    if not _BASE64_PREFIX.match(text[:120]):
        return text
    try:
        decoded = decode_base64_text(text).decode("utf-8-sig")
    except (ValueError, UnicodeDecodeError):
        return text
    return decoded if decoded.startswith(_TEXT_HEADERS) else text


def _as_text(content: FileContent) -> str:
    if isinstance(content, str):
        return _unwrap_base64_text(content)
    try:
        return _unwrap_base64_text(bytes(content).decode("utf-8-sig"))
    except UnicodeDecodeError as exc:
        raise PaletteFormatError(f"Text palette is not valid UTF-8: {exc}") from exc


def parse_jasc_palette(content: FileContent) -> list[RGB]:
    """Parse a JASC-PAL or GIMP palette into RGB triplets.

    Header lines, comments (``#``) and lines with fewer than three numeric
    fields are skipped; trailing colour names are ignored.

    Raises
    ------
    PaletteFormatError
        If a component is outside 0-255 or no colour is found.
    """
    colors: list[RGB] = []
    for line_no, line in enumerate(_as_text(content).splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or stripped.startswith(_TEXT_HEADERS):
            continue
        parts = stripped.split()
        if len(parts) < 3:
            continue
        try:
            r, g, b = (int(part) for part in parts[:3])
        except ValueError:
            continue
        if not all(0 <= value <= 255 for value in (r, g, b)):
            raise PaletteFormatError(f"Colour component out of range on line {line_no}.")
        colors.append((r, g, b))
    if not colors:
        raise PaletteFormatError("No valid colours found in text palette.")
    return colors


def _aco_color(space: int, w: int, x: int, y: int) -> RGB:
    if space == _ACO_RGB:
        return (w >> 8, x >> 8, y >> 8)
    if space == _ACO_HSB:
        r, g, b = colorsys.hsv_to_rgb(w / 65535, x / 65535, y / 65535)
        return (round(r * 255), round(g * 255), round(b * 255))
    if space == _ACO_GRAYSCALE:
        gray = 255 - round(min(w, 10000) * 255 / 10000)
        return (gray, gray, gray)
    raise PaletteFormatError(f"Unsupported ACO colour space {space}.")


def parse_aco_palette(content: FileContent) -> list[RGB]:
    """Parse a Photoshop ``.aco`` swatch file (version 1 or 2).

    Only RGB, HSB and grayscale swatches are supported.
    """
    data = _as_bytes(content)
    try:
        version, count = struct.unpack_from(">HH", data, 0)
        offset = 4
        if version not in (1, 2):
            raise PaletteFormatError(f"Unknown ACO version {version}.")
        colors: list[RGB] = []
        for _ in range(count):
            space, w, x, y, _z = struct.unpack_from(">HHHHH", data, offset)
            offset += 10
            if version == 2:
                (name_len,) = struct.unpack_from(">I", data, offset)
                offset += 4 + name_len * 2
            colors.append(_aco_color(space, w, x, y))
    except struct.error as exc:
        raise PaletteFormatError(f"Truncated ACO palette: {exc}") from exc
    if not colors:
        raise PaletteFormatError("ACO palette contains no swatches.")
    return colors


def encode_act(colors: Sequence[RGB]) -> bytes:
    """Encode colours as a 772-byte Adobe Color Table.

    256 RGB triplets (unused slots zeroed) followed by the colour count and
    the transparency index, both big-endian u16. The transparency index is
    always 0 (none). Colours past the 256th are dropped.
    """
    used = list(colors[:ACT_COLOR_SLOTS])
    table = bytearray(ACT_SIZE)
    for index, (r, g, b) in enumerate(used):
        table[index * 3 : index * 3 + 3] = bytes((r, g, b))
    struct.pack_into(">HH", table, ACT_COLOR_SLOTS * 3, len(used), 0)
    return bytes(table)


def decode_act(content: FileContent) -> list[RGB]:
    """Decode an Adobe Color Table, honouring the colour-count trailer."""
    data = _as_bytes(content)
    if len(data) < 3:
        raise PaletteFormatError("ACT palette is shorter than one colour.")
    count = min(ACT_COLOR_SLOTS, len(data) // 3)
    if len(data) >= ACT_SIZE:
        (declared,) = struct.unpack_from(">H", data, ACT_COLOR_SLOTS * 3)
        if 0 < declared <= ACT_COLOR_SLOTS:
            count = declared
    return [tuple(data[i * 3 : i * 3 + 3]) for i in range(count)]  # type: ignore[misc]


def load_palette(content: FileContent, extension: str) -> list[RGB]:
    """Parse palette content according to its source extension."""
    ext = extension.lower()
    if ext == ".aco":
        return parse_aco_palette(content)
    if ext == ".act":
        return decode_act(content)
    if ext == ".pal":
        return parse_jasc_palette(content)
    raise PaletteFormatError(f"Unsupported palette extension '{extension}'.")
