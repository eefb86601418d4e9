"""Application use-cases orchestrating batch builds."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Iterable, Sequence

from retro_build.adapters.storage import StorageSourceEnumerator
from retro_build.application.options import BuildOptions
from retro_build.application.ports import (
    BuildHooks,
    NullHooks,
    SourceEnumerator,
    Storage,
)
from retro_build.application.results import (
    BuildReport,
    BuildResult,
    BuildStatus,
    SourceFile,
)
from retro_build.builders.registry import BuilderRegistry, create_default_registry
from retro_build.errors import (
    BuildError,
    BuildInProgressError,
    EnumerationError,
    ResolutionError,
)
from retro_build.paths import DEFAULT_PATHS, ProjectPaths

logger = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Build cancelled"


class BuildOrchestrator:
    """Run builders over a batch of source files.

    Files are built one at a time in enumeration order. A failing file
    never stops the batch: every input gets exactly one result.

    Parameters
    ----------
    registry : BuilderRegistry
        Registry used to resolve a builder per file.
    storage : Storage
        Collaborator injected into every builder.
    paths : ProjectPaths | None, optional
        Path translator injected into every builder.
    hooks : BuildHooks | None, optional
        Progress side channel.
    options : BuildOptions | None, optional
        Timeout and cleaning toggles.
    project : str | None, optional
        Project name whose build prefix is cleaned in multi-project storage.
    """

    def __init__(
        self,
        registry: BuilderRegistry,
        storage: Storage,
        *,
        paths: ProjectPaths | None = None,
        hooks: BuildHooks | None = None,
        options: BuildOptions | None = None,
        project: str | None = None,
    ) -> None:
        self.registry = registry
        self.storage = storage
        self.paths = paths or DEFAULT_PATHS
        self.hooks: BuildHooks = hooks or NullHooks()
        self.options = options or BuildOptions()
        self.project = project
        self._status = BuildStatus.IDLE
        self._cancel_requested = False

    @property
    def status(self) -> BuildStatus:
        return self._status

    @property
    def is_building(self) -> bool:
        return self._status is BuildStatus.RUNNING

    def cancel(self) -> None:
        """Request cancellation; honoured between files, never mid-file."""
        if self.is_building:
            self._cancel_requested = True

    async def build_project(self, enumerator: SourceEnumerator) -> BuildReport:
        """Enumerate sources and build them.

        Raises
        ------
        EnumerationError
            If the enumerator fails; no file is built in that case.
        """
        try:
            files = await enumerator.enumerate()
        except Exception as exc:
            raise EnumerationError(f"Failed to enumerate source files: {exc}") from exc
        return await self.build(files)

    async def build(self, files: Sequence[SourceFile]) -> BuildReport:
        """Build every file and aggregate the results.

        Raises
        ------
        BuildInProgressError
            If this orchestrator is already running a build.
        """
        if self.is_building:
            raise BuildInProgressError("Build already in progress")
        self._status = BuildStatus.RUNNING
        self._cancel_requested = False
        started = time.perf_counter()
        try:
            if self.options.clean_before_build:
                await self.clean_output()
            report = await self._run(list(files), started)
        except BaseException:
            self._status = BuildStatus.IDLE
            raise
        self._status = report.status
        return report

    async def _run(self, files: list[SourceFile], started: float) -> BuildReport:
        total = len(files)
        self.hooks.on_batch_start(total)
        results: list[BuildResult] = []
        writers: dict[str, list[str]] = {}

        for index, file in enumerate(files):
            self.hooks.on_file_start(index, total, file)
            if self._cancel_requested:
                result = BuildResult.failed(
                    input_path=file.path or "unknown", error=CANCELLED_MESSAGE
                )
            else:
                result = await self.build_file(file)
            results.append(result)
            if result.success and result.output_path:
                writers.setdefault(result.output_path, []).append(result.input_path)
            self.hooks.on_file_done(index, total, result)

        conflicts = {
            output: tuple(inputs) for output, inputs in writers.items() if len(inputs) > 1
        }
        for output, inputs in conflicts.items():
            logger.warning(
                "%d sources wrote %s; last write wins (%s)",
                len(inputs),
                output,
                ", ".join(inputs),
            )

        report = BuildReport.from_results(
            results,
            duration_seconds=time.perf_counter() - started,
            output_conflicts=conflicts,
        )
        self.hooks.on_batch_done(report)
        return report

    async def build_file(self, file: SourceFile) -> BuildResult:
        """Resolve and run the builder for one file; never raises."""
        input_path = file.path or "unknown"
        if not file.path:
            return BuildResult.failed(input_path=input_path, error="File path is required")
        try:
            builder_cls = self.registry.resolve(file.path, file.builder_id_override)
        except ResolutionError as exc:
            logger.warning("no builder for %s: %s", file.path, exc)
            return BuildResult.failed(input_path=input_path, error=str(exc))

        builder = builder_cls(self.storage, self.paths)
        pending = builder.build(file, explicit=bool(file.builder_id_override))
        timeout = self.options.file_timeout
        try:
            if timeout is None:
                return await pending
            return await asyncio.wait_for(pending, timeout)
        except TimeoutError:
            logger.warning("%s timed out after %ss", file.path, timeout)
            return builder.result_failed(input_path, f"Build timed out after {timeout}s")
        except BuildError as exc:
            return builder.result_failed(input_path, str(exc))
        except Exception as exc:
            logger.exception("unexpected error while building %s", file.path)
            return builder.result_failed(
                input_path, f"Unexpected {type(exc).__name__}: {exc}"
            )

    async def clean_output(self) -> int:
        """Delete stored artifacts under the build prefix; return the count."""
        prefix = self.paths.build_storage_prefix()
        if self.project:
            prefix = f"{self.project}/{prefix}"
        stale = await self.storage.list_files(prefix)
        for path in stale:
            await self.storage.delete_file(path)
        logger.info("cleaned %d artifact(s) under %s", len(stale), prefix)
        return len(stale)


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
    """Use-case: enumerate a project's sources and build them."""
    paths = paths or DEFAULT_PATHS
    registry = registry or create_default_registry(extra_modules=plugin_modules)
    enumerator = enumerator or StorageSourceEnumerator(
        storage, project=project, paths=paths
    )
    orchestrator = BuildOrchestrator(
        registry,
        storage,
        paths=paths,
        hooks=hooks,
        options=options,
        project=project,
    )
    return await orchestrator.build_project(enumerator)


async def build_files(
    files: Sequence[SourceFile],
    *,
    storage: Storage,
    registry: BuilderRegistry | None = None,
    paths: ProjectPaths | None = None,
    hooks: BuildHooks | None = None,
    options: BuildOptions | None = None,
) -> BuildReport:
    """Use-case: build an explicit list of source files."""
    orchestrator = BuildOrchestrator(
        registry or create_default_registry(),
        storage,
        paths=paths,
        hooks=hooks,
        options=options,
    )
    return await orchestrator.build(files)
