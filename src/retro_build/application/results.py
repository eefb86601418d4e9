"""Application-layer data objects: source files, build results and reports."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

from retro_build.schemas import BuildResultPayload
from retro_build.types import FileContent, MetadataValue

NO_BUILDER_ID = "none"
NO_BUILDER_NAME = "No Builder"


@dataclass(frozen=True)
class SourceFile:
    """One asset to be built.

    ``content`` is ``None`` when the payload is not in memory and must be
    loaded through the storage collaborator.
    """

    path: str
    content: FileContent | None = None
    content_is_binary: bool = False
    builder_id_override: str | None = None


@dataclass(frozen=True)
class BuildResult:
    """Outcome of one builder invocation.

    ``success=True`` with ``output_path=None`` is an exclusion: the builder
    intentionally produced no artifact.
    """

    success: bool
    input_path: str
    builder_id: str
    builder_name: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    output_path: str | None = None
    metadata: Mapping[str, MetadataValue] | None = None
    error: str | None = None

    @classmethod
    def succeeded(
        cls,
        *,
        input_path: str,
        builder_id: str,
        builder_name: str,
        output_path: str | None,
        metadata: Mapping[str, MetadataValue] | None = None,
    ) -> BuildResult:
        """Create a successful result (``output_path=None`` for exclusions)."""
        return cls(
            success=True,
            input_path=input_path,
            builder_id=builder_id,
            builder_name=builder_name,
            output_path=output_path,
            metadata=dict(metadata or {}),
        )

    @classmethod
    def failed(
        cls,
        *,
        input_path: str,
        error: str,
        builder_id: str = NO_BUILDER_ID,
        builder_name: str = NO_BUILDER_NAME,
    ) -> BuildResult:
        """Create a failed result carrying a human-readable message."""
        return cls(
            success=False,
            input_path=input_path,
            builder_id=builder_id,
            builder_name=builder_name,
            error=error or "Unknown build error",
        )

    @property
    def excluded(self) -> bool:
        """Return ``True`` for successful results without an artifact."""
        return self.success and self.output_path is None

    def to_dict(self) -> dict[str, object]:
        """Serialise into the JSON wire shape."""
        payload = BuildResultPayload(
            success=self.success,
            input_path=self.input_path,
            builder_id=self.builder_id,
            builder_name=self.builder_name,
            timestamp=self.timestamp,
            output_path=self.output_path if self.success else None,
            metadata=dict(self.metadata) if self.success and self.metadata is not None else None,
            error=None if self.success else self.error,
        )
        return payload.to_wire()


class BuildStatus(StrEnum):
    """Lifecycle of one orchestrator run."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    PARTIALLY_FAILED = "partially_failed"


@dataclass(frozen=True)
class BuildReport:
    """Ordered results of a batch build, one entry per input file."""

    results: tuple[BuildResult, ...]
    duration_seconds: float = 0.0
    output_conflicts: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    @classmethod
    def from_results(
        cls,
        results: Sequence[BuildResult],
        *,
        duration_seconds: float = 0.0,
        output_conflicts: Mapping[str, tuple[str, ...]] | None = None,
    ) -> BuildReport:
        """Freeze a result sequence into a report."""
        return cls(
            results=tuple(results),
            duration_seconds=duration_seconds,
            output_conflicts=dict(output_conflicts or {}),
        )

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        """Successful results, exclusions included."""
        return sum(1 for result in self.results if result.success)

    @property
    def built(self) -> int:
        return sum(1 for result in self.results if result.success and not result.excluded)

    @property
    def excluded(self) -> int:
        return sum(1 for result in self.results if result.excluded)

    @property
    def failed(self) -> int:
        return sum(1 for result in self.results if not result.success)

    @property
    def status(self) -> BuildStatus:
        """Terminal status of the run that produced this report."""
        return BuildStatus.PARTIALLY_FAILED if self.failed else BuildStatus.COMPLETED

    @property
    def failures(self) -> tuple[BuildResult, ...]:
        return tuple(result for result in self.results if not result.success)

    def summary(self) -> str:
        """Return a one-line human summary of the batch."""
        if self.total == 0:
            return "No files to build"
        if self.failed:
            return (
                f"Build completed with {self.failed} failure"
                f"{'s' if self.failed != 1 else ''} "
                f"({self.built} built, {self.excluded} excluded)"
            )
        if self.excluded:
            return (
                f"Build succeeded: {self.built} built with {self.excluded} "
                f"exclusion{'s' if self.excluded != 1 else ''}"
            )
        return f"Build succeeded: all {self.built} files built"

    def to_dict(self) -> dict[str, object]:
        """Serialise report and counts into a JSON-compatible mapping."""
        return {
            "status": self.status.value,
            "summary": {
                "total": self.total,
                "succeeded": self.succeeded,
                "built": self.built,
                "excluded": self.excluded,
                "failed": self.failed,
                "durationSeconds": round(self.duration_seconds, 6),
            },
            "outputConflicts": {
                path: list(inputs) for path, inputs in self.output_conflicts.items()
            },
            "results": [result.to_dict() for result in self.results],
        }
