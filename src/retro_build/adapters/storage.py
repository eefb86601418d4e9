"""Storage collaborators: in-memory and filesystem-backed."""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path, PurePosixPath

from retro_build.application.ports import Storage, StoredFile
from retro_build.application.results import SourceFile
from retro_build.content import content_bytes
from retro_build.errors import StorageError
from retro_build.paths import DEFAULT_PATHS, ProjectPaths
from retro_build.types import FileContent

logger = logging.getLogger(__name__)

BINARY_EXTENSIONS = frozenset(
    {
        ".wav", ".mp3", ".ogg", ".m4a", ".flac",
        ".mod", ".xm", ".s3m", ".it", ".mptm",
        ".act", ".aco", ".dat", ".bin", ".d2",
        ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp", ".ico", ".psd",
    }
)  # fmt: skip


class InMemoryStorage:
    """Dict-backed storage with last-write-wins semantics."""

    def __init__(self, files: Mapping[str, FileContent] | None = None) -> None:
        self._files: dict[str, StoredFile] = {}
        self._lock = asyncio.Lock()
        for path, content in (files or {}).items():
            self._files[path] = StoredFile(
                path=path,
                content=content,
                binary_data=not isinstance(content, str),
            )

    async def load_file(self, path: str) -> StoredFile:
        try:
            return self._files[path]
        except KeyError as exc:
            raise StorageError(f"File not found in storage: {path}") from exc

    async def save_file(
        self,
        path: str,
        content: FileContent,
        *,
        binary_data: bool = False,
    ) -> None:
        if not path:
            raise StorageError("Cannot save to an empty path.")
        if isinstance(content, bytearray | memoryview):
            content = bytes(content)
        async with self._lock:
            self._files[path] = StoredFile(path=path, content=content, binary_data=binary_data)

    async def list_files(self, prefix: str = "") -> list[str]:
        return sorted(path for path in self._files if path.startswith(prefix))

    async def delete_file(self, path: str) -> None:
        async with self._lock:
            self._files.pop(path, None)

    def snapshot(self) -> dict[str, FileContent]:
        """Return a copy of stored contents keyed by path."""
        return {path: record.content for path, record in self._files.items()}


class FilesystemStorage:
    """Storage rooted at a project directory.

    Storage paths are relative POSIX paths below ``root``. Saves are atomic:
    content is written to a temporary sibling and moved into place. String
    content saved with ``binary_data`` holds base64 and is decoded first.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).resolve()

    def _resolve(self, path: str) -> Path:
        relative = PurePosixPath(path)
        if not path or relative.is_absolute() or ".." in relative.parts:
            raise StorageError(f"Storage path escapes project root: {path!r}")
        return self.root.joinpath(*relative.parts)

    async def load_file(self, path: str) -> StoredFile:
        target = self._resolve(path)
        return await asyncio.to_thread(self._load_sync, path, target)

    def _load_sync(self, path: str, target: Path) -> StoredFile:
        try:
            raw = target.read_bytes()
        except OSError as exc:
            raise StorageError(f"Failed to read {path}: {exc.strerror or exc}") from exc
        if target.suffix.lower() in BINARY_EXTENSIONS:
            return StoredFile(path=path, content=raw, binary_data=True)
        try:
            return StoredFile(path=path, content=raw.decode("utf-8"), binary_data=False)
        except UnicodeDecodeError:
            return StoredFile(path=path, content=raw, binary_data=True)

    async def save_file(
        self,
        path: str,
        content: FileContent,
        *,
        binary_data: bool = False,
    ) -> None:
        target = self._resolve(path)
        try:
            data = content_bytes(content, binary_data=binary_data)
        except ValueError as exc:
            raise StorageError(f"Binary content for {path} is not valid base64: {exc}") from exc
        await asyncio.to_thread(self._save_sync, target, data)

    def _save_sync(self, target: Path, data: bytes) -> None:
        tmp_name: str | None = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                dir=target.parent, prefix=f".{target.name}.", delete=False
            ) as handle:
                tmp_name = handle.name
                handle.write(data)
            os.replace(tmp_name, target)
        except OSError as exc:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"Failed to write {target}: {exc.strerror or exc}") from exc
        logger.debug("wrote %d bytes to %s", len(data), target)

    async def list_files(self, prefix: str = "") -> list[str]:
        return await asyncio.to_thread(self._list_sync, prefix)

    def _list_sync(self, prefix: str) -> list[str]:
        found: list[str] = []
        if not self.root.is_dir():
            raise StorageError(f"Project root does not exist: {self.root}")
        for entry in self.root.rglob("*"):
            if not entry.is_file():
                continue
            relative = entry.relative_to(self.root).as_posix()
            if relative.startswith(prefix):
                found.append(relative)
        return sorted(found)

    async def delete_file(self, path: str) -> None:
        target = self._resolve(path)
        try:
            await asyncio.to_thread(target.unlink, missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to delete {path}: {exc.strerror or exc}") from exc


class StorageSourceEnumerator:
    """Enumerate ``[project/]Sources/`` files of a storage, sorted by path.

    Parameters
    ----------
    storage : Storage
        Storage to list.
    project : str | None, optional
        Project name prefix in multi-project workspaces.
    paths : ProjectPaths | None, optional
        Translator providing the Sources label.
    builder_overrides : Mapping[str, str] | None, optional
        Explicit builder id per source path.
    """

    def __init__(
        self,
        storage: Storage,
        *,
        project: str | None = None,
        paths: ProjectPaths | None = None,
        builder_overrides: Mapping[str, str] | None = None,
    ) -> None:
        self.storage = storage
        self.project = project
        self.paths = paths or DEFAULT_PATHS
        self.builder_overrides = dict(builder_overrides or {})

    @property
    def prefix(self) -> str:
        sources = self.paths.sources_root_ui() + "/"
        return f"{self.project}/{sources}" if self.project else sources

    async def enumerate(self) -> list[SourceFile]:
        paths = await self.storage.list_files(self.prefix)
        return [
            SourceFile(path=path, builder_id_override=self.builder_overrides.get(path))
            for path in paths
        ]
