"""Builder contract, built-in builders and registry."""

from .base import Builder, InputValidation
from .copy import CopyBuilder
from .do_nothing import DoNothingBuilder
from .palette import PaletteBuilder
from .registry import BuilderRegistry, create_default_registry

__all__ = [
    "Builder",
    "BuilderRegistry",
    "CopyBuilder",
    "DoNothingBuilder",
    "InputValidation",
    "PaletteBuilder",
    "create_default_registry",
]
