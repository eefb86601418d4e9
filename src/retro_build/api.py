"""Public synchronous API (delegates to application use-cases)."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Iterable
from typing import Optional

from retro_build.adapters.storage import FilesystemStorage
from retro_build.application.options import BuildOptions
from retro_build.application.ports import BuildHooks
from retro_build.application.results import BuildReport
from retro_build.application.use_cases import build_project
from retro_build.builders.base import change_extension
from retro_build.builders.registry import create_default_registry
from retro_build.paths import DEFAULT_PATHS, ProjectPaths
from retro_build.schemas import BuilderDescriptor


def build_directory(
    project_root: Path,
    *,
    project: Optional[str] = None,
    plugin_modules: Optional[Iterable[str]] = None,
    file_timeout: Optional[float] = None,
    clean: bool = False,
    hooks: Optional[BuildHooks] = None,
    paths: Optional[ProjectPaths] = None,
) -> BuildReport:
    """Build the ``Sources/`` tree of a project directory into ``build/``."""
    storage = FilesystemStorage(project_root)
    options = BuildOptions(file_timeout=file_timeout, clean_before_build=clean)
    return asyncio.run(
        build_project(
            storage=storage,
            project=project,
            plugin_modules=plugin_modules,
            paths=paths,
            hooks=hooks,
            options=options,
        )
    )


def resolve_builder(
    path: str,
    *,
    builder_id: Optional[str] = None,
    plugin_modules: Optional[Iterable[str]] = None,
) -> BuilderDescriptor:
    """Return the descriptor of the builder the default registry selects."""
    registry = create_default_registry(extra_modules=plugin_modules)
    return registry.resolve(path, builder_id).descriptor()


def output_path_for(path: str, *, paths: Optional[ProjectPaths] = None) -> str:
    """Return the artifact path the resolved builder would write for ``path``.

    Returns an empty string for builders that produce no artifact.
    """
    translator = paths or DEFAULT_PATHS
    extension = create_default_registry().resolve(path).get_output_extension()
    if extension == "":
        return ""
    renamed = path if extension is None else change_extension(path, extension)
    return translator.to_build_output_path(renamed)
