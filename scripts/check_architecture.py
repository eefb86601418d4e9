#!/usr/bin/env python3
"""Architecture boundary checks."""

from __future__ import annotations

from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _assert_no_imports(path: Path, banned: list[str]) -> None:
    text = _read(path)
    for token in banned:
        if token in text:
            raise SystemExit(f"Architecture violation in {path}: found '{token}'")


def main() -> None:
    """Run repository architecture boundary checks."""
    package = ROOT / "src/retro_build"
    for layer in ("application", "builders", "adapters"):
        for path in (package / layer).glob("*.py"):
            _assert_no_imports(
                path,
                [
                    "import typer",
                    "from typer",
                    "retro_build.cli",
                ],
            )

    # Builders reach storage only through the injected port.
    for path in (package / "builders").glob("*.py"):
        _assert_no_imports(
            path,
            [
                "retro_build.adapters",
                "retro_build.application.use_cases",
            ],
        )

    _assert_no_imports(package / "paths.py", ["import os", "open("])

    print("Architecture checks passed.")


if __name__ == "__main__":
    main()
