"""Unit tests for UI/storage path translation."""

from __future__ import annotations

import os

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from retro_build.paths import (
    DEFAULT_PATHS,
    ProjectPaths,
    normalize_storage_path,
    resolve_folder_for_extension,
    to_build_output_path,
)
from retro_build.schemas import PathConfig

_HYPOTHESIS_MAX_EXAMPLES = int(os.getenv("HYPOTHESIS_MAX_EXAMPLES", "100"))

_segment = st.text(
    alphabet=st.characters(whitelist_categories=("Ll", "Lu", "Nd"), max_codepoint=127),
    min_size=1,
    max_size=8,
)


def test_sources_root_is_replaced_by_build_prefix() -> None:
    assert to_build_output_path("Sources/Lua/main.lua") == "build/Lua/main.lua"


def test_path_outside_sources_is_prefixed() -> None:
    assert to_build_output_path("Other/foo.bin") == "build/Other/foo.bin"


def test_build_output_path_keeps_case_of_rest() -> None:
    assert to_build_output_path("Sources/SFX/Jump.WAV") == "build/SFX/Jump.WAV"


@pytest.mark.parametrize(
    "path, expected",
    [
        ("build/Lua/main.lua", "build/Lua/main.lua"),
        ("Build/Lua/main.lua", "build/Lua/main.lua"),
        ("Game Objects/Lua/main.lua", "build/Lua/main.lua"),
    ],
)
def test_build_namespace_is_not_prefixed_twice(path: str, expected: str) -> None:
    assert to_build_output_path(path) == expected


@pytest.mark.parametrize("value", ["", "   ", None])
def test_empty_input_maps_to_empty_string(value: str | None) -> None:
    assert to_build_output_path(value) == ""


def test_malformed_input_never_raises() -> None:
    assert normalize_storage_path(None) == ""
    assert normalize_storage_path("") == ""
    assert DEFAULT_PATHS.map_storage_to_ui(None) == ""
    assert DEFAULT_PATHS.split_project(None) == (None, "")
    assert not DEFAULT_PATHS.is_build_artifact(None)


def test_project_prefix_is_kept() -> None:
    assert to_build_output_path("Demo/Sources/a.lua") == "Demo/build/a.lua"


def test_project_literally_named_sources() -> None:
    """A project called ``Sources`` is told apart from the Sources root."""
    assert DEFAULT_PATHS.split_project("Sources/Sources/a.lua") == ("Sources", "Sources/a.lua")
    assert to_build_output_path("Sources/Sources/a.lua") == "Sources/build/a.lua"


def test_project_literally_named_build() -> None:
    assert DEFAULT_PATHS.split_project("build/Sources/a.lua") == ("build", "Sources/a.lua")
    assert to_build_output_path("build/Sources/a.lua") == "build/build/a.lua"


def test_sources_subfolder_named_build_is_not_a_project() -> None:
    assert DEFAULT_PATHS.split_project("Sources/build/a.lua") == (None, "Sources/build/a.lua")
    assert to_build_output_path("Sources/build/a.lua") == "build/build/a.lua"


def test_short_paths_have_no_project() -> None:
    assert DEFAULT_PATHS.split_project("Sources/a.lua") == (None, "Sources/a.lua")


@pytest.mark.parametrize(
    "path, expected",
    [
        ("Game Objects/SFX/jump.wav", "build/SFX/jump.wav"),
        ("game objects/SFX/jump.wav", "build/SFX/jump.wav"),
        ("Build/SFX/jump.wav", "build/SFX/jump.wav"),
        ("Demo/Game Objects/a.lua", "Demo/build/a.lua"),
        ("Sources/SFX/jump.wav", "Sources/SFX/jump.wav"),
    ],
)
def test_normalize_storage_path(path: str, expected: str) -> None:
    assert normalize_storage_path(path) == expected


def test_map_storage_to_ui() -> None:
    assert DEFAULT_PATHS.map_storage_to_ui("build/Lua/main.lua") == "Game Objects/Lua/main.lua"
    assert DEFAULT_PATHS.map_storage_to_ui("Sources/Lua/main.lua") == "Sources/Lua/main.lua"


@pytest.mark.parametrize(
    "extension, folder",
    [
        (".lua", "Sources/Lua"),
        (".LUA", "Sources/Lua"),
        (".xm", "Sources/Music"),
        (".mod", "Sources/Music"),
        (".wav", "Sources/SFX"),
        (".pal", "Sources/Palettes"),
        (".aco", "Sources/Palettes"),
        (".bin", "Sources/Binary"),
        ("", "Sources/Binary"),
        (None, "Sources/Binary"),
    ],
)
def test_resolve_folder_for_extension(extension: str | None, folder: str) -> None:
    assert resolve_folder_for_extension(extension) == folder


def test_classification_helpers() -> None:
    assert DEFAULT_PATHS.is_build_artifact("build/a.lua")
    assert DEFAULT_PATHS.is_build_artifact("Demo/Game Objects/a.lua")
    assert not DEFAULT_PATHS.is_build_artifact("Sources/a.lua")
    assert DEFAULT_PATHS.is_sources_path("Demo/Sources/Lua/a.lua")
    assert not DEFAULT_PATHS.is_sources_path("")


def test_custom_config() -> None:
    paths = ProjectPaths(PathConfig(sources_label="src", build_storage_prefix="OUT"))
    assert paths.build_storage_prefix() == "out/"
    assert paths.to_build_output_path("src/a.lua") == "out/a.lua"
    assert paths.default_main_script_path() == "src/Lua/main.lua"


def test_path_config_rejects_blank_labels() -> None:
    with pytest.raises(ValueError):
        PathConfig(sources_label="  ")


@settings(max_examples=_HYPOTHESIS_MAX_EXAMPLES, deadline=None)
@given(segments=st.lists(_segment, min_size=1, max_size=5))
def test_normalize_storage_path_is_idempotent(segments: list[str]) -> None:
    """Property check: normalising twice equals normalising once."""
    for root in ("build", "Build", "Game Objects", "Sources", segments[0]):
        path = "/".join([root, *segments])
        once = normalize_storage_path(path)
        assert normalize_storage_path(once) == once


@settings(max_examples=_HYPOTHESIS_MAX_EXAMPLES, deadline=None)
@given(segments=st.lists(_segment, min_size=1, max_size=5))
def test_sources_paths_land_under_build_prefix(segments: list[str]) -> None:
    """Property check: plain Sources/<rest> maps to build/<rest>."""
    rest = "/".join(segments)
    source = f"Sources/{rest}"
    output = to_build_output_path(source)
    if DEFAULT_PATHS.split_project(source)[0] is None:
        assert output == f"build/{rest}"
    assert normalize_storage_path(output) == output
