#!/usr/bin/env python3
"""Ensure every third-party import is declared in the matching pyproject group.

* ``src/retro_build`` outside ``cli/`` may only use base dependencies.
* ``src/retro_build/cli`` may also use the ``cli`` extra.
* ``tests/`` may use base dependencies and the ``test`` extra.
"""

from __future__ import annotations

import ast
import re
import sys
import tomllib
from collections.abc import Iterable
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
PACKAGE = ROOT / "src/retro_build"
FIRST_PARTY = frozenset({"retro_build", "conftest"})

# Import names whose distribution name differs beyond ``_`` -> ``-``.
IMPORT_TO_DISTRIBUTION: dict[str, str] = {}

_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


def requirement_name(requirement: str) -> str:
    """Return the normalised distribution name of a requirement string."""
    match = _REQUIREMENT_NAME.match(requirement)
    if match is None:
        raise ValueError(f"Unparseable requirement: {requirement!r}")
    return re.sub(r"[-_.]+", "-", match.group(1)).lower()


def distribution_for(import_name: str) -> str:
    """Map a top-level import name to its distribution name."""
    return IMPORT_TO_DISTRIBUTION.get(import_name, import_name.replace("_", "-").lower())


def third_party_imports(files: Iterable[Path]) -> dict[str, set[Path]]:
    """Collect top-level third-party imports, keyed by distribution name."""
    found: dict[str, set[Path]] = {}
    for path in files:
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                names = [alias.name for alias in node.names]
            elif isinstance(node, ast.ImportFrom) and node.level == 0 and node.module:
                names = [node.module]
            else:
                continue
            for name in names:
                top = name.split(".", 1)[0]
                if top in sys.stdlib_module_names or top in FIRST_PARTY:
                    continue
                found.setdefault(distribution_for(top), set()).add(path)
    return found


def declared(pyproject: dict[str, object], *extras: str) -> set[str]:
    """Return distribution names of base dependencies plus ``extras``."""
    project = pyproject["project"]
    assert isinstance(project, dict)
    requirements = list(project.get("dependencies", []))
    optional = project.get("optional-dependencies", {})
    for extra in extras:
        requirements.extend(optional.get(extra, []))
    return {requirement_name(req) for req in requirements}


def _display(path: Path) -> str:
    return str(path.relative_to(ROOT)) if path.is_relative_to(ROOT) else str(path)


def undeclared(files: Iterable[Path], allowed: set[str]) -> list[str]:
    """Return ``dist (file)`` entries for imports outside ``allowed``."""
    problems: list[str] = []
    for dist, paths in sorted(third_party_imports(files).items()):
        if dist not in allowed:
            where = ", ".join(sorted(_display(p) for p in paths))
            problems.append(f"{dist} ({where})")
    return problems


def main() -> None:
    """Fail when an import is not declared in the group that ships it."""
    pyproject = tomllib.loads((ROOT / "pyproject.toml").read_text(encoding="utf-8"))
    cli_dir = PACKAGE / "cli"
    core_files = [p for p in PACKAGE.rglob("*.py") if cli_dir not in p.parents]
    groups = [
        ("core", core_files, declared(pyproject)),
        ("cli", list(cli_dir.rglob("*.py")), declared(pyproject, "cli")),
        ("tests", list((ROOT / "tests").rglob("*.py")), declared(pyproject, "test")),
    ]

    failures: list[str] = []
    for label, files, allowed in groups:
        failures.extend(f"[{label}] {entry}" for entry in undeclared(files, allowed))
    if failures:
        raise SystemExit(
            "Undeclared third-party imports:\n" + "\n".join(f"- {f}" for f in failures)
        )
    print("Declared dependency check passed.")


if __name__ == "__main__":
    main()
