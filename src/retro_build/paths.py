"""Mapping between UI-facing project paths and the build storage namespace.

Every function here is total: malformed or empty input maps to itself or to
an empty string and nothing raises. Validation belongs to the builder layer.

Paths come in two flavours:

* UI paths such as ``Sources/Lua/main.lua`` (optionally prefixed by a
  project name, ``Demo/Sources/Lua/main.lua``).
* Storage paths such as ``build/Lua/main.lua`` where ``build/`` is the
  storage prefix for build artifacts.
"""

from __future__ import annotations

from retro_build.schemas import PathConfig

LEGACY_BUILD_ROOT = "Build"

_MUSIC_EXTENSIONS = frozenset({".mod", ".xm", ".s3m", ".it", ".mptm"})
_SFX_EXTENSIONS = frozenset({".wav", ".sfx"})
_PALETTE_EXTENSIONS = frozenset({".pal", ".act", ".aco"})


class ProjectPaths:
    """Pure path translator configured by a :class:`PathConfig`."""

    def __init__(self, config: PathConfig | None = None) -> None:
        self._config = config or PathConfig()

    @property
    def config(self) -> PathConfig:
        """Return the immutable root configuration."""
        return self._config

    def sources_root_ui(self) -> str:
        """Return the UI label of the sources root."""
        return self._config.sources_label

    def build_root_ui(self) -> str:
        """Return the UI label of the build root."""
        return self._config.build_label

    def build_storage_prefix(self) -> str:
        """Return the slash-terminated storage prefix of build artifacts."""
        return self._config.build_storage_prefix

    def sources_subfolder(self, name: str) -> str:
        """Return ``Sources/<name>``."""
        return f"{self.sources_root_ui()}/{name}"

    def default_main_script_path(self) -> str:
        """Return the default location of the project entry script."""
        return f"{self.sources_root_ui()}/Lua/main.lua"

    def resolve_folder_for_extension(self, extension: str | None) -> str:
        """Return the Sources subfolder new files of ``extension`` default into.

        Parameters
        ----------
        extension : str | None
            File extension including the leading dot. Case-insensitive.

        Returns
        -------
        str
            UI folder path such as ``Sources/Music``.
        """
        ext = (extension or "").lower()
        if ext == ".lua":
            return self.sources_subfolder("Lua")
        if ext in _MUSIC_EXTENSIONS:
            return self.sources_subfolder("Music")
        if ext in _SFX_EXTENSIONS:
            return self.sources_subfolder("SFX")
        if ext in _PALETTE_EXTENSIONS:
            return self.sources_subfolder("Palettes")
        return self.sources_subfolder("Binary")

    def root_labels(self) -> frozenset[str]:
        """Return every segment that marks a Sources or build root."""
        return frozenset(
            {
                self.sources_root_ui(),
                self.build_root_ui(),
                self.build_storage_prefix().rstrip("/"),
                LEGACY_BUILD_ROOT,
            }
        )

    def split_project(self, path: str | None) -> tuple[str | None, str]:
        """Split an optional leading project segment from a path.

        The decision is made against the known root labels, not by
        position. A leading segment followed by the Sources label is always
        a project (``build/Sources/a.lua`` belongs to a project literally
        named ``build``). A leading segment followed by a build root is a
        project only when it is not itself a root label, so
        ``Sources/build/a.lua`` stays a plain Sources path.

        Returns
        -------
        tuple[str | None, str]
            Project name (or ``None``) and the remaining path.
        """
        if not isinstance(path, str) or not path:
            return None, ""
        trimmed = path.lstrip("/")
        segments = trimmed.split("/")
        if len(segments) < 3 or not segments[0]:
            return None, trimmed
        labels = self.root_labels()
        head, second = segments[0], segments[1]
        if second == self.sources_root_ui() or (
            second in labels and head not in labels
        ):
            return head, "/".join(segments[1:])
        return None, trimmed

    def to_build_output_path(self, source_ui_path: str | None) -> str:
        """Compute the storage path of the artifact built from a source path.

        ``Sources/Lua/main.lua`` becomes ``build/Lua/main.lua``. A project
        prefix is kept in front of the storage prefix. Paths outside the
        Sources root are placed under the build prefix unchanged, and paths
        already under a build root (including legacy ``Build/``) are
        normalised rather than prefixed twice.
        """
        if not isinstance(source_ui_path, str) or not source_ui_path.strip():
            return ""
        project, rest = self.split_project(source_ui_path.strip())
        prefix = self.build_storage_prefix()
        sources_root = self.sources_root_ui() + "/"

        if rest.startswith(sources_root):
            mapped = prefix + rest[len(sources_root) :]
        elif self._build_root_length(rest):
            mapped = prefix + rest[self._build_root_length(rest) :]
        else:
            mapped = prefix + rest
        return f"{project}/{mapped}" if project else mapped

    def normalize_storage_path(self, path: str | None) -> str:
        """Map the UI build label and legacy casing onto the storage prefix.

        Idempotent: canonical storage paths are returned unchanged.
        """
        if not isinstance(path, str):
            return ""
        if not path:
            return path
        project, rest = self.split_project(path)
        length = self._build_root_length(rest)
        if length:
            rest = self.build_storage_prefix() + rest[length:]
        elif project is None:
            rest = path
        return f"{project}/{rest}" if project else rest

    def map_storage_to_ui(self, path: str | None) -> str:
        """Map a storage build path to the UI build label for display."""
        if not isinstance(path, str):
            return ""
        project, rest = self.split_project(path)
        prefix = self.build_storage_prefix()
        if rest.startswith(prefix):
            rest = f"{self.build_root_ui()}/{rest[len(prefix):]}"
        elif project is None:
            rest = path
        return f"{project}/{rest}" if project else rest

    def is_build_artifact(self, path: str | None) -> bool:
        """Return ``True`` for paths under any build root spelling."""
        if not isinstance(path, str) or not path:
            return False
        _, rest = self.split_project(path)
        return bool(self._build_root_length(rest))

    def is_sources_path(self, path: str | None) -> bool:
        """Return ``True`` for paths under the Sources root."""
        if not isinstance(path, str) or not path:
            return False
        _, rest = self.split_project(path)
        return rest.startswith(self.sources_root_ui() + "/")

    def _build_root_length(self, path: str) -> int:
        """Return the length of a leading build root, or 0 when absent."""
        prefix = self.build_storage_prefix()
        if path.startswith(prefix):
            return len(prefix)
        legacy = LEGACY_BUILD_ROOT + "/"
        if path.startswith(legacy):
            return len(legacy)
        ui_root = self.build_root_ui() + "/"
        if path[: len(ui_root)].lower() == ui_root.lower():
            return len(ui_root)
        return 0


DEFAULT_PATHS = ProjectPaths()


def to_build_output_path(source_ui_path: str | None) -> str:
    """Map a source UI path to its build storage path using default roots."""
    return DEFAULT_PATHS.to_build_output_path(source_ui_path)


def normalize_storage_path(path: str | None) -> str:
    """Normalise a UI build path to canonical storage form using default roots."""
    return DEFAULT_PATHS.normalize_storage_path(path)


def resolve_folder_for_extension(extension: str | None) -> str:
    """Return the default Sources subfolder for an extension."""
    return DEFAULT_PATHS.resolve_folder_for_extension(extension)


__all__ = [
    "DEFAULT_PATHS",
    "LEGACY_BUILD_ROOT",
    "ProjectPaths",
    "normalize_storage_path",
    "resolve_folder_for_extension",
    "to_build_output_path",
]
