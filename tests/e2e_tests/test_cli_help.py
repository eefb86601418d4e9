"""End-to-end smoke tests for the installed CLI."""

from __future__ import annotations

import subprocess
from pathlib import Path

import retro_build


def test_package_import_smoke() -> None:
    """Ensure package can be imported in the test process."""
    assert retro_build.__version__


def test_cli_help_smoke() -> None:
    """Ensure the installed CLI entrypoint responds to --help."""
    result = subprocess.run(
        ["retro-build", "--help"],
        capture_output=True,
        text=True,
        check=False,
    )

    assert result.returncode == 0, result.stderr
    assert "Build retro game project assets" in result.stdout


def test_cli_build_missing_project_fails_cleanly(tmp_path: Path) -> None:
    """Ensure CLI returns a user-facing error for a missing project directory."""
    result = subprocess.run(
        ["retro-build", "build", str(tmp_path / "definitely-missing")],
        capture_output=True,
        text=True,
        check=False,
    )

    assert result.returncode != 0
    assert "does not exist" in result.stderr.lower()


def test_cli_build_project(tmp_path: Path) -> None:
    """Build a small project through the installed entrypoint."""
    sources = tmp_path / "Sources" / "SFX"
    sources.mkdir(parents=True)
    (sources / "jump.wav").write_bytes(b"RIFF")

    result = subprocess.run(
        ["retro-build", "build", str(tmp_path)],
        capture_output=True,
        text=True,
        check=False,
    )

    assert result.returncode == 0, result.stderr
    assert "Build succeeded: all 1 files built" in result.stdout
    assert (tmp_path / "build" / "SFX" / "jump.wav").read_bytes() == b"RIFF"
