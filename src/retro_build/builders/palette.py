"""Conversion of source palettes into Adobe Color Tables."""

from __future__ import annotations

import logging

from retro_build.application.results import BuildResult, SourceFile
from retro_build.builders.base import Builder, file_extension
from retro_build.palette import encode_act, load_palette

logger = logging.getLogger(__name__)


class PaletteBuilder(Builder):
    """Convert ``.pal`` and ``.aco`` palettes to the engine's ``.act`` format.

    ``.act`` sources are already in engine format and fall through to the
    copy builder.
    """

    builder_id = "palette"
    display_name = "Palette Builder"
    description = "Converts palette files to Adobe Color Table (.act) format"
    supported_extensions = (".pal", ".aco")
    output_extension = ".act"
    priority = 10
    capabilities = frozenset({"palette-conversion", "format-standardization"})

    async def process(self, file: SourceFile) -> BuildResult:
        source_format = file_extension(file.path).lower()
        content, _ = await self.read_content(file)
        colors = load_palette(content, source_format)
        table = encode_act(colors)

        output_path = self.generate_output_path(file.path)
        await self.save_output(output_path, table, binary_data=True)
        logger.info(
            "converted %s -> %s (%d colours)", file.path, output_path, len(colors)
        )
        return self.result_succeeded(
            file.path,
            output_path,
            {
                "operation": "palette-to-act",
                "colorCount": min(len(colors), 256),
                "sourceFormat": source_format,
                "targetFormat": ".act",
                "fileSize": len(table),
            },
        )
