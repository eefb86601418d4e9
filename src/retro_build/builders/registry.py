"""Builder registry, resolution and plugin discovery helpers."""

from __future__ import annotations

import importlib
import importlib.util
import inspect
import logging
from collections.abc import Iterable
from pathlib import Path
from types import ModuleType

from retro_build.builders.base import Builder, file_extension
from retro_build.builders.copy import CopyBuilder
from retro_build.builders.do_nothing import DoNothingBuilder
from retro_build.builders.palette import PaletteBuilder
from retro_build.errors import BuilderContractError, ResolutionError
from retro_build.schemas import BuilderDescriptor

logger = logging.getLogger(__name__)

BUILTIN_BUILDERS: tuple[type[Builder], ...] = (
    PaletteBuilder,
    DoNothingBuilder,
    CopyBuilder,
)


class BuilderRegistry:
    """Registry of builder classes keyed by id, in registration order."""

    def __init__(self) -> None:
        self._builders: dict[str, type[Builder]] = {}
        self._descriptors: dict[str, BuilderDescriptor] = {}

    def register(self, builder_cls: type[Builder]) -> BuilderDescriptor:
        """Register a builder class after checking its static contract.

        Parameters
        ----------
        builder_cls : type[Builder]
            Concrete builder class.

        Returns
        -------
        BuilderDescriptor
            Validated metadata of the registered builder.

        Raises
        ------
        BuilderContractError
            If the class is not a concrete ``Builder``, its metadata is
            invalid, or its id is already registered.
        """
        if not (inspect.isclass(builder_cls) and issubclass(builder_cls, Builder)):
            raise BuilderContractError(
                f"{builder_cls!r} is not a Builder subclass."
            )
        if inspect.isabstract(builder_cls):
            raise BuilderContractError(
                f"{builder_cls.__name__} does not implement process()."
            )
        descriptor = builder_cls.descriptor()
        if descriptor.id in self._builders:
            raise BuilderContractError(
                f"Builder id '{descriptor.id}' is already registered "
                f"by {self._builders[descriptor.id].__name__}."
            )
        self._builders[descriptor.id] = builder_cls
        self._descriptors[descriptor.id] = descriptor
        logger.debug(
            "registered builder %s (priority %d)", descriptor.id, descriptor.priority
        )
        return descriptor

    def names(self) -> list[str]:
        """Return registered builder ids in registration order."""
        return list(self._builders)

    def descriptors(self) -> list[BuilderDescriptor]:
        """Return descriptors ordered by priority, then registration."""
        order = {name: index for index, name in enumerate(self._builders)}
        return sorted(
            self._descriptors.values(),
            key=lambda item: (item.priority, order[item.id]),
        )

    def get(self, builder_id: str) -> type[Builder]:
        """Get a builder class by id.

        Raises
        ------
        ResolutionError
            If no builder with this id is registered.
        """
        try:
            return self._builders[builder_id]
        except KeyError as exc:
            raise ResolutionError(
                f"Unknown builder '{builder_id}'. "
                f"Available builders: {', '.join(self.names())}"
            ) from exc

    def candidates(self, path: str) -> list[type[Builder]]:
        """Return every builder that claims ``path``, best first.

        Ordering is by priority, ties broken by registration order.
        """
        ranked = [
            (self._descriptors[name].priority, index, builder_cls)
            for index, (name, builder_cls) in enumerate(self._builders.items())
            if builder_cls.can_build(path)
        ]
        ranked.sort(key=lambda item: (item[0], item[1]))
        return [builder_cls for _, _, builder_cls in ranked]

    def resolve(
        self, path: str, builder_id_override: str | None = None
    ) -> type[Builder]:
        """Resolve the builder for a path, or by explicit id.

        Parameters
        ----------
        path : str
            Source path; its extension drives resolution.
        builder_id_override : str | None, optional
            Explicit builder id that bypasses extension matching.

        Returns
        -------
        type[Builder]
            Lowest-priority-value match; first registered wins ties.

        Raises
        ------
        ResolutionError
            If the override id is unknown or no builder claims the extension.
        """
        if builder_id_override:
            return self.get(builder_id_override)

        matches = self.candidates(path)
        if not matches:
            extension = file_extension(path).lower() or "<none>"
            raise ResolutionError(f"No builder for extension '{extension}'")
        return matches[0]

    def load_module(self, module_or_path: str) -> None:
        """Load builders from a module name or file path.

        .. warning::
            This executes code from the module. Only load builders from
            trusted sources.
        """
        module = _import_module_or_path(module_or_path)
        _register_from_module(module, self)


def _import_module_or_path(module_or_path: str) -> ModuleType:
    """Import a module by import path or filesystem path.

    Raises
    ------
    BuilderContractError
        If the module cannot be imported.
    """
    candidate = Path(module_or_path)
    if candidate.exists():
        spec = importlib.util.spec_from_file_location(candidate.stem, candidate)
        if spec is None or spec.loader is None:
            raise BuilderContractError(f"Unable to load builder module from {candidate}.")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    try:
        return importlib.import_module(module_or_path)
    except Exception as exc:
        raise BuilderContractError(
            f"Unable to import builder module '{module_or_path}': {exc}"
        ) from exc


def _register_from_module(module: ModuleType, registry: BuilderRegistry) -> None:
    """Register builders exposed by a module.

    Supported contracts, checked in order: ``register_builders(registry)``,
    a ``BUILDERS`` iterable, or a single ``BUILDER`` class.
    """
    if hasattr(module, "register_builders"):
        module.register_builders(registry)
        return

    builders_obj = getattr(module, "BUILDERS", None)
    if builders_obj is not None:
        for builder_cls in builders_obj:
            registry.register(builder_cls)
        return

    builder_obj = getattr(module, "BUILDER", None)
    if builder_obj is not None:
        registry.register(builder_obj)
        return

    raise BuilderContractError(
        "Builder module must expose register_builders(registry), BUILDERS, or BUILDER."
    )


def create_default_registry(
    extra_modules: Iterable[str] | None = None,
) -> BuilderRegistry:
    """Create a registry with the built-in builders and optional plugins.

    Parameters
    ----------
    extra_modules : Iterable[str] | None, optional
        Additional builder modules to load after the built-ins.

    Returns
    -------
    BuilderRegistry
        Registry ready for resolution.
    """
    registry = BuilderRegistry()
    for builder_cls in BUILTIN_BUILDERS:
        registry.register(builder_cls)
    for module in extra_modules or []:
        registry.load_module(module)
    return registry
