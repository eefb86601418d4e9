"""Explicit exclusion of files that must never reach the build output."""

from __future__ import annotations

import logging

from retro_build.application.results import BuildResult, SourceFile
from retro_build.builders.base import Builder, content_size

logger = logging.getLogger(__name__)

EXCLUSION_REASON = "File excluded from build by Do Nothing Builder"


class DoNothingBuilder(Builder):
    """Exclude files from the build: succeed without producing an artifact.

    Ranked ahead of :class:`~retro_build.builders.copy.CopyBuilder` so that
    exclusion wins for shared extensions, and behind format-specific
    builders (priority below 80) so a dedicated image builder still takes
    raster sources. The ``"*"`` entry lets any file be excluded through an
    explicit builder-id override.
    """

    builder_id = "do-nothing"
    display_name = "Do Nothing Builder"
    description = "Excludes files from build output (no file is generated)"
    supported_extensions = (
        # development
        ".md", ".txt", ".log",
        # temporary
        ".tmp", ".temp", ".bak",
        # design sources
        ".psd", ".ai", ".sketch",
        # documentation
        ".readme", ".license", ".changelog",
        # IDE
        ".vscode", ".idea",
        # version control
        ".git", ".gitignore",
        # build leftovers
        ".build", ".cache",
        # raster images
        ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp", ".svg", ".ico",
        "*",
    )  # fmt: skip
    output_extension = ""
    priority = 80
    capabilities = frozenset({"exclude-from-build", "no-output"})

    async def process(self, file: SourceFile) -> BuildResult:
        """Record the exclusion; no content is loaded and nothing is saved."""
        size = content_size(file.content)
        logger.info("excluded %s (%d bytes)", file.path, size)
        return self.result_succeeded(
            file.path,
            None,
            {"operation": "exclude", "reason": EXCLUSION_REASON, "originalSize": size},
        )
