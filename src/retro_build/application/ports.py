"""Application ports for the collaborators the build pipeline depends on."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from retro_build.types import FileContent

if TYPE_CHECKING:
    from retro_build.application.results import BuildReport, BuildResult, SourceFile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredFile:
    """File record returned by a storage collaborator."""

    path: str
    content: FileContent
    binary_data: bool = False

    @property
    def size(self) -> int:
        """Byte length for binary content, character length for text."""
        if isinstance(self.content, memoryview):
            return self.content.nbytes
        return len(self.content)


class Storage(Protocol):
    """Content-addressable load/save by path."""

    async def load_file(self, path: str) -> StoredFile:
        """Load a stored file or raise ``StorageError``."""

    async def save_file(
        self,
        path: str,
        content: FileContent,
        *,
        binary_data: bool = False,
    ) -> None:
        """Save atomically (last write wins) or raise ``StorageError``."""

    async def list_files(self, prefix: str = "") -> list[str]:
        """Return stored paths starting with ``prefix``."""

    async def delete_file(self, path: str) -> None:
        """Remove a stored path; missing paths are ignored."""


class SourceEnumerator(Protocol):
    """Produce the source files of a project, in build order."""

    async def enumerate(self) -> list[SourceFile]:
        """Return every source file to build."""


class BuildHooks(Protocol):
    """Side-channel progress notifications around a batch and each file."""

    def on_batch_start(self, total: int) -> None:
        """Called once before the first file."""

    def on_file_start(self, index: int, total: int, file: SourceFile) -> None:
        """Called before each file, cancelled ones included."""

    def on_file_done(self, index: int, total: int, result: BuildResult) -> None:
        """Called after a file's result is recorded."""

    def on_batch_done(self, report: BuildReport) -> None:
        """Called once after the last file."""


class NullHooks:
    """Hooks that ignore every notification."""

    def on_batch_start(self, total: int) -> None:
        del total

    def on_file_start(self, index: int, total: int, file: SourceFile) -> None:
        del index, total, file

    def on_file_done(self, index: int, total: int, result: BuildResult) -> None:
        del index, total, result

    def on_batch_done(self, report: BuildReport) -> None:
        del report


class LoggingHooks:
    """Hooks that report progress through the module logger."""

    def on_batch_start(self, total: int) -> None:
        logger.info("starting build of %d file(s)", total)

    def on_file_start(self, index: int, total: int, file: SourceFile) -> None:
        logger.info("building %d/%d: %s", index + 1, total, file.path)

    def on_file_done(self, index: int, total: int, result: BuildResult) -> None:
        del total
        if not result.success:
            logger.warning("failed #%d %s: %s", index + 1, result.input_path, result.error)
        elif result.excluded:
            logger.info("excluded %s", result.input_path)
        else:
            logger.info("built %s -> %s", result.input_path, result.output_path)

    def on_batch_done(self, report: BuildReport) -> None:
        logger.info("%s", report.summary())
