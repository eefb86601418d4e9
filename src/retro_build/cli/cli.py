#!/usr/bin/env python3
"""
retro_build.cli.cli

Typer-based CLI for building retro game project assets.

The build reads ``Sources/`` below a project directory, resolves a builder
per file and writes artifacts under ``build/``.

Examples
--------
Install core + CLI:

    uv pip install -e ".[cli]"

Build a project and print a JSON report:

    retro-build build ./my-game --json
"""

from __future__ import annotations

import json
import logging
import traceback
from pathlib import Path

import typer

from retro_build.application.ports import LoggingHooks
from retro_build.application.results import BuildReport, BuildResult
from retro_build.builders.base import file_extension
from retro_build.errors import BuildError, ResolutionError

app = typer.Typer(
    name="retro-build",
    help="Build retro game project assets (Sources/ -> build/).",
    no_args_is_help=True,
)

PLUGIN_MODULE_HELP = "Builder module import path or file path (repeatable)."


def _configure_logging(debug: bool, verbose: bool) -> None:
    """Configure root logging for CLI runs."""
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )


def _print_build_error(exc: Exception, debug: bool) -> int:
    """Print a user-friendly error and return the process exit code.

    Parameters
    ----------
    exc : Exception
        Exception raised by the build.
    debug : bool
        Whether to include traceback details.

    Returns
    -------
    int
        Process exit code.
    """
    typer.echo(f"✗ {type(exc).__name__}: {exc}", err=True)
    if debug:
        typer.echo("\nTraceback:", err=True)
        typer.echo("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), err=True)
    code = getattr(exc, "exit_code", None)
    if isinstance(code, int) and code > 0:
        return code
    return 1


def _format_result(result: BuildResult) -> str:
    """Render one build result as a single line."""
    if not result.success:
        return f"✗ {result.input_path}: {result.error}"
    if result.excluded:
        return f"- {result.input_path} (excluded by {result.builder_id})"
    return f"✓ {result.input_path} -> {result.output_path} ({result.builder_id})"


def _echo_report(report: BuildReport, as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps(report.to_dict(), indent=2))
        return
    for result in report.results:
        typer.echo(_format_result(result))
    for output, inputs in report.output_conflicts.items():
        typer.echo(f"! {output} written by {', '.join(inputs)}")
    typer.echo(report.summary())


# -----------------------------
# Global options
# -----------------------------
@app.callback()
def _main(
    ctx: typer.Context,
    debug: bool = typer.Option(
        False, "--debug", help="Show debug logs and full tracebacks on error."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show progress logs."),
) -> None:
    """Initialize shared CLI state.

    Parameters
    ----------
    ctx : typer.Context
        Typer context object used to store shared state.
    debug : bool, default=False
        Whether to enable debug logging and error output.
    verbose : bool, default=False
        Whether to log per-file progress.
    """
    _configure_logging(debug, verbose)
    ctx.obj = {"debug": debug}


# -----------------------------
# Commands
# -----------------------------
@app.command("build")
def build_cmd(
    ctx: typer.Context,
    project_root: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=False,
        dir_okay=True,
        help="Project directory containing Sources/.",
    ),
    project: str | None = typer.Option(
        None, "--project", help="Project name inside a multi-project workspace."
    ),
    plugin_module: list[str] | None = typer.Option(
        None, "--plugin-module", help=PLUGIN_MODULE_HELP
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", min=0.001, help="Per-file build timeout in seconds."
    ),
    clean: bool = typer.Option(
        False, "--clean", help="Remove existing build artifacts first."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON."),
) -> None:
    """Build every file under Sources/ and print a report.

    Exits with code 1 when at least one file failed.
    """
    debug: bool = bool(ctx.obj.get("debug", False))

    try:
        from retro_build.api import build_directory

        report = build_directory(
            project_root,
            project=project,
            plugin_modules=plugin_module,
            file_timeout=timeout,
            clean=clean,
            hooks=LoggingHooks(),
        )
    except BuildError as exc:
        raise typer.Exit(code=_print_build_error(exc, debug))
    except Exception as exc:
        # Unexpected crash: still show a clean message; debug prints traceback.
        raise typer.Exit(code=_print_build_error(exc, debug))

    _echo_report(report, as_json)
    if report.failed:
        raise typer.Exit(code=1)


@app.command("builders")
def builders_cmd(
    ctx: typer.Context,
    plugin_module: list[str] | None = typer.Option(
        None, "--plugin-module", help=PLUGIN_MODULE_HELP
    ),
) -> None:
    """List registered builders, best priority first."""
    debug: bool = bool(ctx.obj.get("debug", False))
    from retro_build.builders.registry import create_default_registry

    try:
        registry = create_default_registry(extra_modules=plugin_module)
    except BuildError as exc:
        raise typer.Exit(code=_print_build_error(exc, debug))

    for descriptor in registry.descriptors():
        output = descriptor.output_extension
        target = "same" if output is None else output or "none"
        typer.echo(
            f"{descriptor.priority:>3}  {descriptor.id:<12} -> {target:<5} "
            f"{' '.join(descriptor.supported_extensions)}"
        )


@app.command("which")
def which_cmd(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Source path, e.g. Sources/SFX/jump.wav."),
    builder_id: str | None = typer.Option(
        None, "--builder", help="Explicit builder id override."
    ),
) -> None:
    """Show which builder handles a source path."""
    debug: bool = bool(ctx.obj.get("debug", False))
    from retro_build.api import output_path_for, resolve_builder

    try:
        descriptor = resolve_builder(path, builder_id=builder_id)
    except ResolutionError as exc:
        raise typer.Exit(code=_print_build_error(exc, debug))

    typer.echo(f"{descriptor.id} ({descriptor.display_name}, priority {descriptor.priority})")
    if builder_id is None:
        output = output_path_for(path)
        typer.echo(f"output: {output or '<none>'}")


@app.command("paths")
def paths_cmd(
    path: str = typer.Argument(..., help="UI path to translate."),
) -> None:
    """Show the storage mappings of a UI path."""
    from retro_build.paths import DEFAULT_PATHS

    typer.echo(f"build output: {DEFAULT_PATHS.to_build_output_path(path)}")
    typer.echo(f"storage:      {DEFAULT_PATHS.normalize_storage_path(path)}")
    typer.echo(
        "default folder: "
        f"{DEFAULT_PATHS.resolve_folder_for_extension(file_extension(path))}"
    )


if __name__ == "__main__":
    app()
