"""Shared pytest configuration, suite markers and project fixtures."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TypeAlias

import pytest

TreeWriter: TypeAlias = Callable[[Path, Mapping[str, str | bytes]], Path]

_SUITE_MARKERS = {
    "e2e_tests": "e2e",
    "integration_tests": "integration",
    "unit_tests": "unit",
}


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Attach suite markers by directory and ``property`` to hypothesis tests."""
    del config
    for item in items:
        parts = set(Path(str(item.fspath)).parts)
        for directory, marker in _SUITE_MARKERS.items():
            if directory in parts:
                item.add_marker(getattr(pytest.mark, marker))
                break
        test_fn = getattr(item, "obj", None)
        if getattr(test_fn, "is_hypothesis_test", False):
            item.add_marker(pytest.mark.property)


def _write_tree(root: Path, files: Mapping[str, str | bytes]) -> Path:
    for relative, content in files.items():
        target = root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def write_tree() -> TreeWriter:
    """Return a helper writing ``{relative path: content}`` below a root."""
    return _write_tree
