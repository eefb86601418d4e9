"""Unit tests for build results, wire shape and report summaries."""

from __future__ import annotations

from datetime import datetime

import pytest
from pydantic import ValidationError

from retro_build.application.results import BuildReport, BuildResult, BuildStatus
from retro_build.schemas import BuildResultPayload


def _ok(path: str = "Sources/a.lua", output: str | None = "build/a.lua") -> BuildResult:
    return BuildResult.succeeded(
        input_path=path,
        builder_id="copy",
        builder_name="Copy Builder",
        output_path=output,
        metadata={"operation": "copy", "fileSize": 1, "isBinary": False},
    )


def _bad(path: str = "Sources/x.xyz") -> BuildResult:
    return BuildResult.failed(input_path=path, error="No builder for extension '.xyz'")


def test_success_wire_shape() -> None:
    wire = _ok().to_dict()
    assert set(wire) == {
        "success",
        "inputPath",
        "builderId",
        "builderName",
        "timestamp",
        "outputPath",
        "metadata",
    }
    assert wire["outputPath"] == "build/a.lua"
    assert datetime.fromisoformat(str(wire["timestamp"])).tzinfo is not None


def test_exclusion_wire_shape_has_null_output() -> None:
    wire = _ok(output=None).to_dict()
    assert wire["success"] is True
    assert "outputPath" in wire and wire["outputPath"] is None
    assert "error" not in wire


def test_failure_wire_shape() -> None:
    wire = _bad().to_dict()
    assert wire["success"] is False
    assert wire["builderId"] == "none"
    assert wire["builderName"] == "No Builder"
    assert wire["error"] == "No builder for extension '.xyz'"
    assert "outputPath" not in wire and "metadata" not in wire


def test_failed_result_never_has_empty_error() -> None:
    assert BuildResult.failed(input_path="a", error="").error == "Unknown build error"


def test_payload_rejects_inconsistent_outcomes() -> None:
    with pytest.raises(ValidationError):
        BuildResultPayload(
            success=False,
            inputPath="a",
            builderId="copy",
            builderName="Copy",
            timestamp=datetime.now(),
            outputPath="build/a",
            error="boom",
        )
    with pytest.raises(ValidationError):
        BuildResultPayload(
            success=True,
            inputPath="a",
            builderId="copy",
            builderName="Copy",
            timestamp=datetime.now(),
            error="boom",
        )


@pytest.mark.parametrize(
    "results, summary, status",
    [
        ([], "No files to build", BuildStatus.COMPLETED),
        ([_ok(), _ok("Sources/b.lua", "build/b.lua")], "Build succeeded: all 2 files built", BuildStatus.COMPLETED),
        ([_ok(), _ok(output=None)], "Build succeeded: 1 built with 1 exclusion", BuildStatus.COMPLETED),
        (
            [_ok(), _ok(output=None), _bad(), _bad()],
            "Build completed with 2 failures (1 built, 1 excluded)",
            BuildStatus.PARTIALLY_FAILED,
        ),
        ([_bad()], "Build completed with 1 failure (0 built, 0 excluded)", BuildStatus.PARTIALLY_FAILED),
    ],
)
def test_report_summary(results: list[BuildResult], summary: str, status: BuildStatus) -> None:
    report = BuildReport.from_results(results)
    assert report.summary() == summary
    assert report.status is status


def test_report_counts_and_dict() -> None:
    report = BuildReport.from_results(
        [_ok(), _ok(output=None), _bad()],
        duration_seconds=0.25,
        output_conflicts={"build/a.lua": ("Sources/a.lua", "Sources/A.lua")},
    )
    assert (report.total, report.succeeded, report.built, report.excluded, report.failed) == (
        3,
        2,
        1,
        1,
        1,
    )
    assert [r.input_path for r in report.failures] == ["Sources/x.xyz"]

    data = report.to_dict()
    assert data["status"] == "partially_failed"
    assert data["summary"] == {
        "total": 3,
        "succeeded": 2,
        "built": 1,
        "excluded": 1,
        "failed": 1,
        "durationSeconds": 0.25,
    }
    assert data["outputConflicts"] == {"build/a.lua": ["Sources/a.lua", "Sources/A.lua"]}
    assert len(data["results"]) == 3  # type: ignore[arg-type]
