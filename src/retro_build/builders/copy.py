"""Verbatim passthrough of non-image assets into the build directory."""

from __future__ import annotations

import logging

from retro_build.application.results import BuildResult, SourceFile
from retro_build.builders.base import Builder, content_size, file_extension

logger = logging.getLogger(__name__)


class CopyBuilder(Builder):
    """Copy files to the build directory without modification.

    Image extensions are deliberately absent: images belong to the
    image-specific pipeline and are otherwise excluded by
    :class:`~retro_build.builders.do_nothing.DoNothingBuilder`.
    """

    builder_id = "copy"
    display_name = "Copy Builder"
    description = "Copies files to build directory without modification"
    supported_extensions = (
        # audio
        ".wav", ".mp3", ".ogg", ".m4a", ".flac",
        # documents
        ".txt", ".md", ".json", ".xml", ".csv",
        # scripts
        ".lua", ".js", ".py",
        # tracker modules
        ".mod", ".xm", ".s3m", ".it",
        # palettes
        ".act", ".pal",
        # data
        ".dat", ".bin",
    )  # fmt: skip
    output_extension = None
    priority = 90
    capabilities = frozenset({"file-copy", "asset-passthrough"})

    async def process(self, file: SourceFile) -> BuildResult:
        """Copy ``file`` verbatim to its build output path."""
        output_path = self.generate_output_path(file.path, file_extension(file.path))
        content, is_binary = await self.read_content(file)
        await self.save_output(output_path, content, binary_data=is_binary)

        size = content_size(content)
        logger.info("copied %s -> %s (%d bytes)", file.path, output_path, size)
        return self.result_succeeded(
            file.path,
            output_path,
            {"operation": "copy", "fileSize": size, "isBinary": is_binary},
        )
