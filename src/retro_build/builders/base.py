"""Builder contract shared by every asset builder."""

from __future__ import annotations

import abc
import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import ClassVar

from pydantic import ValidationError

from retro_build.application.ports import Storage, StoredFile
from retro_build.application.results import BuildResult, SourceFile
from retro_build.errors import BuildError, BuilderContractError, StorageError
from retro_build.paths import DEFAULT_PATHS, ProjectPaths
from retro_build.schemas import BuilderDescriptor
from retro_build.types import WILDCARD_EXTENSION, FileContent, MetadataValue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InputValidation:
    """Outcome of :meth:`Builder.validate_input`."""

    valid: bool
    error: str | None = None


def file_extension(path: str) -> str:
    """Return the extension of the last path segment, dot included.

    Dotfiles keep their full name as extension (``.gitignore``); paths
    without a dot in the last segment return ``""``.
    """
    name = path.rsplit("/", 1)[-1]
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


def change_extension(path: str, new_extension: str) -> str:
    """Replace the extension of the last path segment."""
    ext = file_extension(path)
    stem = path[: len(path) - len(ext)] if ext else path
    return stem + new_extension


def content_size(content: FileContent | None) -> int:
    """Return byte length of binary content or character length of text."""
    if content is None:
        return 0
    if isinstance(content, memoryview):
        return content.nbytes
    return len(content)


def is_binary_content(content: FileContent | None, flagged: bool = False) -> bool:
    """Classify content as binary (byte buffer or flagged string payload)."""
    if isinstance(content, bytes | bytearray | memoryview):
        return True
    return isinstance(content, str) and flagged


class Builder(abc.ABC):
    """Base class for asset builders.

    Concrete builders declare their metadata as class attributes and
    implement :meth:`process`. ``builder_id`` has no default: a class that
    does not set it is rejected at registration.

    Parameters
    ----------
    storage : Storage
        Collaborator used to load inputs and save artifacts.
    paths : ProjectPaths | None, optional
        Path translator computing output locations.
    """

    builder_id: ClassVar[str] = ""
    display_name: ClassVar[str] = ""
    description: ClassVar[str] = "No description provided"
    supported_extensions: ClassVar[tuple[str, ...]] = ()
    output_extension: ClassVar[str | None] = None
    priority: ClassVar[int] = 50
    capabilities: ClassVar[frozenset[str]] = frozenset()

    def __init__(self, storage: Storage, paths: ProjectPaths | None = None) -> None:
        self.storage = storage
        self.paths = paths or DEFAULT_PATHS

    # ------------------------------------------------------------------
    # Static metadata
    # ------------------------------------------------------------------
    @classmethod
    def get_id(cls) -> str:
        if not cls.builder_id:
            raise BuilderContractError(f"{cls.__name__} must define 'builder_id'.")
        return cls.builder_id

    @classmethod
    def get_name(cls) -> str:
        return cls.display_name or cls.__name__

    @classmethod
    def get_description(cls) -> str:
        return cls.description

    @classmethod
    def get_supported_extensions(cls) -> tuple[str, ...]:
        return tuple(ext.lower() for ext in cls.supported_extensions)

    @classmethod
    def get_output_extension(cls) -> str | None:
        return cls.output_extension

    @classmethod
    def get_priority(cls) -> int:
        return cls.priority

    @classmethod
    def get_capabilities(cls) -> frozenset[str]:
        return frozenset(cls.capabilities)

    @classmethod
    def descriptor(cls) -> BuilderDescriptor:
        """Return validated metadata for registration.

        Raises
        ------
        BuilderContractError
            If any metadata accessor fails or returns invalid values.
        """
        try:
            return BuilderDescriptor(
                id=cls.get_id(),
                display_name=cls.get_name(),
                description=cls.get_description(),
                supported_extensions=cls.get_supported_extensions(),
                output_extension=cls.get_output_extension(),
                priority=cls.get_priority(),
                capabilities=cls.get_capabilities(),
            )
        except BuilderContractError:
            raise
        except ValidationError as exc:
            raise BuilderContractError(
                f"Invalid metadata for builder {cls.__name__}: {exc}"
            ) from exc
        except Exception as exc:
            raise BuilderContractError(
                f"Builder {cls.__name__} metadata accessor failed: {exc}"
            ) from exc

    @classmethod
    def can_build(cls, path: str, *, explicit: bool = False) -> bool:
        """Check whether this builder handles ``path``.

        Parameters
        ----------
        path : str
            Source path; only its extension is inspected.
        explicit : bool, default=False
            ``True`` when the builder was selected by id override. Only then
            does a ``"*"`` entry accept any extension.

        Returns
        -------
        bool
            ``True`` if the extension is claimed by this builder.
        """
        extensions = cls.get_supported_extensions()
        if explicit and WILDCARD_EXTENSION in extensions:
            return True
        extension = file_extension(path).lower()
        return bool(extension) and extension in extensions

    # ------------------------------------------------------------------
    # Instance contract
    # ------------------------------------------------------------------
    def validate_input(
        self, file: SourceFile | None, *, explicit: bool = False
    ) -> InputValidation:
        """Validate a file before any I/O happens."""
        if file is None:
            return InputValidation(False, "No file provided")
        if not file.path:
            return InputValidation(False, "File path is required")
        if not type(self).can_build(file.path, explicit=explicit):
            return InputValidation(
                False,
                f"File extension '{file_extension(file.path)}' not supported by "
                f"{self.get_name()}",
            )
        return InputValidation(True)

    async def build(self, file: SourceFile, *, explicit: bool = False) -> BuildResult:
        """Build one file, converting ordinary failures into a failed result.

        Parameters
        ----------
        file : SourceFile
            Source to build.
        explicit : bool, default=False
            Whether this builder was chosen by id override.

        Returns
        -------
        BuildResult
            Success (with or without artifact) or failure with a message.
        """
        input_path = getattr(file, "path", None) or "unknown"
        validation = self.validate_input(file, explicit=explicit)
        if not validation.valid:
            logger.warning("%s rejected %s: %s", self.get_name(), input_path, validation.error)
            return self.result_failed(input_path, validation.error or "Invalid input")
        try:
            return await self.process(file)
        except BuildError as exc:
            logger.warning("%s failed on %s: %s", self.get_name(), input_path, exc)
            return self.result_failed(input_path, str(exc))

    @abc.abstractmethod
    async def process(self, file: SourceFile) -> BuildResult:
        """Transform a validated file; raise ``BuildError`` on ordinary failure."""

    def generate_output_path(
        self, input_path: str, output_extension: str | None = None
    ) -> str:
        """Compose the storage path of the artifact built from ``input_path``.

        The extension is swapped to ``output_extension`` when given, else to
        the class output extension; ``None`` keeps the input extension. The
        result is then mapped from the Sources root into the build prefix.
        """
        extension = (
            output_extension
            if output_extension is not None
            else self.get_output_extension()
        )
        renamed = input_path if extension is None else change_extension(input_path, extension)
        return self.paths.to_build_output_path(renamed)

    async def read_content(self, file: SourceFile) -> tuple[FileContent, bool]:
        """Return in-memory content or load it, with its binary flag."""
        if file.content is not None:
            return file.content, is_binary_content(file.content, file.content_is_binary)
        stored = await self.load_input(file.path)
        flagged = file.content_is_binary or stored.binary_data
        return stored.content, is_binary_content(stored.content, flagged)

    async def load_input(self, path: str) -> StoredFile:
        """Load a source through storage, wrapping failures as ``StorageError``."""
        storage_path = self.paths.normalize_storage_path(path)
        try:
            stored = await self.storage.load_file(storage_path)
        except StorageError:
            raise
        except Exception as exc:
            raise StorageError(f"Failed to load {storage_path}: {exc}") from exc
        logger.debug("[%s] loaded %s", self.get_name(), storage_path)
        return stored

    async def save_output(
        self, output_path: str, content: FileContent, *, binary_data: bool
    ) -> None:
        """Save an artifact through storage, wrapping failures as ``StorageError``.

        A save that has started always runs to completion. When the build
        is cancelled meanwhile (a per-file timeout), the written artifact is
        removed again so storage agrees with the failed result.
        """
        save = asyncio.ensure_future(
            self.storage.save_file(output_path, content, binary_data=binary_data)
        )
        try:
            await asyncio.shield(save)
        except asyncio.CancelledError:
            await asyncio.wait({save})
            if not save.cancelled() and save.exception() is None:
                logger.warning(
                    "[%s] build of %s interrupted; removing artifact",
                    self.get_name(),
                    output_path,
                )
                await self.storage.delete_file(output_path)
            raise
        except StorageError:
            raise
        except Exception as exc:
            raise StorageError(f"Failed to save {output_path}: {exc}") from exc
        logger.debug("[%s] saved %s", self.get_name(), output_path)

    def result_succeeded(
        self,
        input_path: str,
        output_path: str | None,
        metadata: Mapping[str, MetadataValue] | None = None,
    ) -> BuildResult:
        return BuildResult.succeeded(
            input_path=input_path,
            builder_id=self.get_id(),
            builder_name=self.get_name(),
            output_path=output_path,
            metadata=metadata,
        )

    def result_failed(self, input_path: str, error: str) -> BuildResult:
        return BuildResult.failed(
            input_path=input_path,
            builder_id=self.get_id(),
            builder_name=self.get_name(),
            error=error,
        )
