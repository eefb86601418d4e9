"""Top-level API for building retro game project assets."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from retro_build.application.results import BuildReport, BuildResult, SourceFile
from retro_build.paths import (
    ProjectPaths,
    normalize_storage_path,
    resolve_folder_for_extension,
    to_build_output_path,
)
from retro_build.schemas import BuilderDescriptor, PathConfig

__version__ = "0.1.0"


def build_directory(
    project_root: Path,
    *,
    project: str | None = None,
    plugin_modules: Iterable[str] | None = None,
    file_timeout: float | None = None,
    clean: bool = False,
) -> BuildReport:
    """Build a project directory's sources into its build directory.

    Parameters
    ----------
    project_root : Path
        Directory containing ``Sources/`` (or ``<project>/Sources/``).
    project : str | None, optional
        Project name in a multi-project workspace.
    plugin_modules : Iterable[str] | None, optional
        Extra builder modules to register.
    file_timeout : float | None, optional
        Per-file timeout in seconds.
    clean : bool, default=False
        Remove existing artifacts before building.

    Returns
    -------
    BuildReport
        One result per source file, in path order.
    """
    from .api import build_directory as _impl

    return _impl(
        project_root,
        project=project,
        plugin_modules=plugin_modules,
        file_timeout=file_timeout,
        clean=clean,
    )


def resolve_builder(path: str, *, builder_id: str | None = None) -> BuilderDescriptor:
    """Return the descriptor of the builder selected for ``path``."""
    from .api import resolve_builder as _impl

    return _impl(path, builder_id=builder_id)


__all__ = [
    "BuildReport",
    "BuildResult",
    "BuilderDescriptor",
    "PathConfig",
    "ProjectPaths",
    "SourceFile",
    "build_directory",
    "normalize_storage_path",
    "resolve_builder",
    "resolve_folder_for_extension",
    "to_build_output_path",
]
