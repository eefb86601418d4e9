"""Typed option objects shared across build use-cases."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BuildOptions:
    """Orchestrator toggles.

    ``file_timeout`` is applied to each file separately, in seconds.
    ``clean_before_build`` removes stored artifacts under the build prefix
    before the first file is built.
    """

    file_timeout: float | None = None
    clean_before_build: bool = False

    def __post_init__(self) -> None:
        if self.file_timeout is not None and self.file_timeout <= 0:
            raise ValueError("file_timeout must be positive when set.")
