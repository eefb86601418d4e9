"""Application-layer use-cases, ports and result objects."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from retro_build.application.options import BuildOptions
from retro_build.application.ports import BuildHooks, SourceEnumerator, Storage
from retro_build.application.results import (
    BuildReport,
    BuildResult,
    BuildStatus,
    SourceFile,
)

if TYPE_CHECKING:
    from retro_build.builders.registry import BuilderRegistry
    from retro_build.paths import ProjectPaths


async def build_project(
    *,
    storage: Storage,
    registry: BuilderRegistry | None = None,
    enumerator: SourceEnumerator | None = None,
    project: str | None = None,
    plugin_modules: Iterable[str] | None = None,
    paths: ProjectPaths | None = None,
    hooks: BuildHooks | None = None,
    options: BuildOptions | None = None,
) -> BuildReport:
    """Build a project's sources via lazy use-case import."""
    from retro_build.application.use_cases import build_project as _impl

    return await _impl(
        storage=storage,
        registry=registry,
        enumerator=enumerator,
        project=project,
        plugin_modules=plugin_modules,
        paths=paths,
        hooks=hooks,
        options=options,
    )


async def build_files(
    files: Sequence[SourceFile],
    *,
    storage: Storage,
    registry: BuilderRegistry | None = None,
    paths: ProjectPaths | None = None,
    hooks: BuildHooks | None = None,
    options: BuildOptions | None = None,
) -> BuildReport:
    """Build explicit source files via lazy use-case import."""
    from retro_build.application.use_cases import build_files as _impl

    return await _impl(
        files,
        storage=storage,
        registry=registry,
        paths=paths,
        hooks=hooks,
        options=options,
    )


__all__ = [
    "BuildOptions",
    "BuildReport",
    "BuildResult",
    "BuildStatus",
    "SourceFile",
    "build_files",
    "build_project",
]
