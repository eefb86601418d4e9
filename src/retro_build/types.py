"""Shared type aliases for build pipeline modules."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Literal, TypeAlias

from typing_extensions import TypeAliasType

FileContent: TypeAlias = bytes | bytearray | memoryview | str

MetadataScalar: TypeAlias = str | int | float | bool | None
MetadataValue = TypeAliasType(
    "MetadataValue",
    MetadataScalar | list["MetadataValue"] | dict[str, "MetadataValue"],
)
Metadata: TypeAlias = Mapping[str, MetadataValue]

BuildOperation: TypeAlias = Literal["copy", "exclude", "palette-to-act"]

WILDCARD_EXTENSION = "*"
