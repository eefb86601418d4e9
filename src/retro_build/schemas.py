"""Pydantic schemas for runtime validation of build inputs and outputs."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from retro_build.types import WILDCARD_EXTENSION, MetadataValue

COPY_METADATA_KEYS = frozenset({"operation", "fileSize", "isBinary"})
EXCLUDE_METADATA_KEYS = frozenset({"operation", "reason", "originalSize"})
PALETTE_METADATA_KEYS = frozenset(
    {"operation", "colorCount", "sourceFormat", "targetFormat", "fileSize"}
)


class BuilderDescriptor(BaseModel):
    """Validated static metadata exposed by a builder class."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(min_length=1)
    display_name: str = Field(min_length=1)
    description: str = "No description provided"
    supported_extensions: tuple[str, ...]
    output_extension: str | None = None
    priority: int = Field(default=50, ge=0, strict=True)
    capabilities: frozenset[str] = frozenset()

    @field_validator("id", "display_name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("builder id and display name cannot be blank.")
        return value

    @field_validator("supported_extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value: object) -> tuple[str, ...]:
        if isinstance(value, str) or value is None:
            raise ValueError("supported_extensions must be a sequence of strings.")
        seen: dict[str, None] = {}
        for item in value:  # type: ignore[attr-defined]
            if not isinstance(item, str):
                raise ValueError(f"extension {item!r} is not a string.")
            ext = item.strip().lower()
            if ext != WILDCARD_EXTENSION and not ext.startswith("."):
                raise ValueError(f"extension {item!r} must start with '.'.")
            if ext == ".":
                raise ValueError("extension '.' is empty.")
            seen.setdefault(ext, None)
        if not seen:
            raise ValueError("supported_extensions cannot be empty.")
        return tuple(seen)

    @field_validator("output_extension")
    @classmethod
    def _validate_output_extension(cls, value: str | None) -> str | None:
        if value and not value.startswith("."):
            raise ValueError("output_extension must start with '.'.")
        return value

    @property
    def wildcard_only(self) -> bool:
        """Return ``True`` when the builder claims nothing but ``"*"``."""
        return self.supported_extensions == (WILDCARD_EXTENSION,)


class BuildResultPayload(BaseModel):
    """Wire shape of a single build result."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    success: bool
    input_path: str = Field(alias="inputPath")
    builder_id: str = Field(alias="builderId")
    builder_name: str = Field(alias="builderName")
    timestamp: datetime
    output_path: str | None = Field(default=None, alias="outputPath")
    metadata: dict[str, MetadataValue] | None = None
    error: str | None = None

    @model_validator(mode="after")
    def _check_outcome_fields(self) -> BuildResultPayload:
        if self.success and self.error is not None:
            raise ValueError("successful results cannot carry an error.")
        if not self.success:
            if not self.error:
                raise ValueError("failed results must carry an error message.")
            if self.output_path is not None or self.metadata is not None:
                raise ValueError("failed results cannot carry output or metadata.")
        return self

    def to_wire(self) -> dict[str, object]:
        """Serialise to the JSON shape with camelCase keys."""
        payload = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        if self.success:
            # outputPath is explicitly null for exclusions.
            payload["outputPath"] = self.output_path
            payload["metadata"] = payload.get("metadata", {})
        return payload


class PathConfig(BaseModel):
    """Root labels used by the path translator."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    sources_label: str = "Sources"
    build_label: str = "Game Objects"
    build_storage_prefix: str = "build/"

    @field_validator("sources_label", "build_label")
    @classmethod
    def _validate_label(cls, value: str) -> str:
        value = value.strip().strip("/")
        if not value:
            raise ValueError("root labels cannot be empty.")
        return value

    @field_validator("build_storage_prefix")
    @classmethod
    def _validate_prefix(cls, value: str) -> str:
        value = value.strip().lstrip("/").lower()
        if not value.strip("/"):
            raise ValueError("build_storage_prefix cannot be empty.")
        return value if value.endswith("/") else value + "/"
