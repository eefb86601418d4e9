"""Exception hierarchy for the asset build pipeline."""

from __future__ import annotations


class BuildError(Exception):
    """Base error for build pipeline failures.

    Attributes
    ----------
    exit_code : int
        Process exit code used by the CLI when the error escapes a command.
    """

    exit_code = 1


class InputValidationError(BuildError):
    """Source file is missing, has no path, or is not supported by its builder."""


class ResolutionError(BuildError):
    """No builder (or no builder with the requested id) matches a file."""


class StorageError(BuildError):
    """Storage collaborator failed to load or save a path."""


class BuilderContractError(BuildError):
    """Builder class violates the static metadata contract."""

    exit_code = 2


class PaletteFormatError(BuildError):
    """Palette payload cannot be parsed or encoded."""


class EnumerationError(BuildError):
    """Source file enumeration failed before any file was built."""


class BuildInProgressError(BuildError):
    """A build was requested while another build is running."""
