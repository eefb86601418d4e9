"""Integration tests building real project directories on disk."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from retro_build.api import build_directory
from retro_build.palette import ACT_SIZE, decode_act

UPPER_PLUGIN = """\
from retro_build.builders.base import Builder

class UpperBuilder(Builder):
    builder_id = 'upper'
    display_name = 'Upper Builder'
    supported_extensions = ('.lua',)
    priority = 5

    async def process(self, file):
        content, _ = await self.read_content(file)
        output = self.generate_output_path(file.path)
        await self.save_output(output, content.upper(), binary_data=False)
        return self.result_succeeded(file.path, output)

BUILDERS = [UpperBuilder]
"""


def test_full_project_build(
    tmp_path: Path, write_tree: Callable[..., Path]
) -> None:
    write_tree(
        tmp_path,
        {
            "Sources/Lua/main.lua": "print('hi')\n",
            "Sources/Music/theme.xm": b"Extended Module: \x00\x01",
            "Sources/Palettes/base.pal": "JASC-PAL\n0100\n2\n0 0 0\n255 255 255\n",
            "Sources/art/sprite.png": b"\x89PNG\r\n",
            "Sources/docs/notes.md": "# notes\n",
            "Sources/unknown.xyz": "???",
        },
    )

    report = build_directory(tmp_path)

    assert report.total == 6
    assert report.built == 3
    assert report.excluded == 2
    assert report.failed == 1
    assert (tmp_path / "build/Lua/main.lua").read_text(encoding="utf-8") == "print('hi')\n"
    assert (tmp_path / "build/Music/theme.xm").read_bytes() == b"Extended Module: \x00\x01"
    table = (tmp_path / "build/Palettes/base.act").read_bytes()
    assert len(table) == ACT_SIZE
    assert decode_act(table) == [(0, 0, 0), (255, 255, 255)]
    assert not (tmp_path / "build/art").exists()
    assert not (tmp_path / "build/docs").exists()


def test_rebuild_overwrites_and_clean_removes_stale(
    tmp_path: Path, write_tree: Callable[..., Path]
) -> None:
    write_tree(tmp_path, {"Sources/Lua/main.lua": "v1"})
    build_directory(tmp_path)
    write_tree(tmp_path, {"Sources/Lua/main.lua": "v2", "build/Lua/old.lua": "stale"})

    report = build_directory(tmp_path, clean=True)

    assert report.failed == 0
    assert (tmp_path / "build/Lua/main.lua").read_text(encoding="utf-8") == "v2"
    assert not (tmp_path / "build/Lua/old.lua").exists()


def test_multi_project_workspace(
    tmp_path: Path, write_tree: Callable[..., Path]
) -> None:
    write_tree(
        tmp_path,
        {"Demo/Sources/Lua/main.lua": "demo", "Other/Sources/Lua/main.lua": "other"},
    )

    report = build_directory(tmp_path, project="Demo")

    assert [r.output_path for r in report.results] == ["Demo/build/Lua/main.lua"]
    assert (tmp_path / "Demo/build/Lua/main.lua").read_text(encoding="utf-8") == "demo"
    assert not (tmp_path / "Other/build").exists()


def test_plugin_builder_from_file(
    tmp_path: Path, write_tree: Callable[..., Path]
) -> None:
    write_tree(
        tmp_path,
        {"upper_plugin.py": UPPER_PLUGIN, "game/Sources/Lua/main.lua": "print(1)"},
    )
    project = tmp_path / "game"

    report = build_directory(project, plugin_modules=[str(tmp_path / "upper_plugin.py")])

    assert report.results[0].builder_id == "upper"
    assert (project / "build/Lua/main.lua").read_text(encoding="utf-8") == "PRINT(1)"
