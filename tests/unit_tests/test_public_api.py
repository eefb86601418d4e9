"""Unit tests for top-level public wrappers."""

from __future__ import annotations

from pathlib import Path

import pytest

import retro_build
from retro_build import api
from retro_build.errors import ResolutionError


def test_resolve_builder_returns_descriptor() -> None:
    descriptor = retro_build.resolve_builder("Sources/SFX/jump.wav")
    assert descriptor.id == "copy"
    assert descriptor.output_extension is None


def test_resolve_builder_override() -> None:
    assert retro_build.resolve_builder("Sources/a.xyz", builder_id="do-nothing").id == "do-nothing"
    with pytest.raises(ResolutionError):
        retro_build.resolve_builder("Sources/a.xyz")


@pytest.mark.parametrize(
    "path, expected",
    [
        ("Sources/SFX/jump.wav", "build/SFX/jump.wav"),
        ("Sources/Palettes/base.aco", "build/Palettes/base.act"),
        ("Sources/art/sprite.png", ""),
    ],
)
def test_output_path_for(path: str, expected: str) -> None:
    assert api.output_path_for(path) == expected


def test_build_directory_wrapper_delegates(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    captured: dict[str, object] = {}

    def fake_impl(project_root: Path, **kwargs: object) -> str:
        captured["root"] = project_root
        captured.update(kwargs)
        return "report"

    monkeypatch.setattr(api, "build_directory", fake_impl)
    out = retro_build.build_directory(tmp_path, project="Demo", file_timeout=2.0)

    assert out == "report"
    assert captured["root"] == tmp_path
    assert captured["project"] == "Demo"
    assert captured["file_timeout"] == 2.0
    assert captured["clean"] is False
