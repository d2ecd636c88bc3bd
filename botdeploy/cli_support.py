"""Shared utilities for botdeploy CLI modules."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import typer
import typer.core
from rich.console import Console
from rich.markup import escape
from typer.core import TyperCommand

from botdeploy.core.config import BotDeploySettings
from botdeploy.core.errors import (
    BotDeployError,
    BuildArtifactMissing,
    RemoteOperationError,
    TemplateSubstitutionIncomplete,
    UnitNotFound,
)


# The click that typer parses with: its bundled typer._click copy on current
# releases, the click distribution on older ones.
_typer_click = getattr(typer.core, "_click", None) or typer.core.click


class UsageErrorCommand(TyperCommand):
    """Command that exits with status 1 (not click's 2) on usage errors."""

    def parse_args(self, ctx, args):
        try:
            return super().parse_args(ctx, args)
        except _typer_click.exceptions.UsageError as e:
            e.exit_code = 1
            raise


def find_workspace(workspace: Optional[Path] = None) -> Path:
    """Locate the workspace root: explicit path, BOTDEPLOY_WORKSPACE, then cwd."""
    if workspace:
        return Path(workspace).expanduser().resolve()

    if env_workspace := os.environ.get("BOTDEPLOY_WORKSPACE"):
        return Path(env_workspace).expanduser().resolve()

    return Path.cwd()


def is_mock() -> bool:
    """Return True when CLI runs in mock mode."""
    return os.environ.get("BOTDEPLOY_MOCK") == "1"


def load_settings(
    workspace: Optional[Path] = None,
    template: Optional[Path] = None,
) -> BotDeploySettings:
    """Load settings for the resolved workspace, applying CLI overrides."""
    settings = BotDeploySettings.load(find_workspace(workspace))
    if template:
        settings.template_path = Path(template)
    return settings


def setup_logging(log_file: Optional[str] = None, verbose: bool = False) -> Path:
    """Set up console verbosity and file logging for CLI commands.

    Args:
        log_file: Path to log file (default: ~/.local/state/botdeploy/botdeploy.log)
        verbose: Enable debug logging

    Returns:
        Path of the log file in use
    """
    from botdeploy.core.logger import set_verbose, setup_file_logging

    path = setup_file_logging(log_file=log_file, verbose=verbose)
    set_verbose(verbose)
    return path


def report_failure(console: Console, error: BotDeployError, verbose: bool = False) -> None:
    """Print a failure with the remediation that fits its class."""
    step = getattr(error, "step", None)
    step_label = f" during {step.value}" if step is not None else ""
    print_error(console, f"Failed{step_label}: {escape(str(error))}")

    if isinstance(error, UnitNotFound):
        console.print("Available units:")
        if error.available:
            for name in error.available:
                console.print(f"  - {name}")
        else:
            console.print("  (none)")
    elif isinstance(error, TemplateSubstitutionIncomplete):
        print_info(console, "Supported placeholders are {{BOT_NAME}} and {{USER}}")
    elif isinstance(error, BuildArtifactMissing):
        print_info(console, "Check the cargo target directory configuration for this workspace")
    elif isinstance(error, RemoteOperationError):
        print_warning(
            console,
            "Remote changes made before this step were not rolled back; "
            "the service may be stopped or partially updated.",
        )

    if verbose:
        console.print_exception()


def handle_cli_error(
    e: BotDeployError,
    console: Console,
    verbose: bool = False,
    exit_code: int = 1,
) -> None:
    """Report a botdeploy error and exit.

    Args:
        e: Error to report
        console: Rich console for output
        verbose: Show exception traceback if True
        exit_code: Exit code to use
    """
    report_failure(console, e, verbose=verbose)
    raise typer.Exit(exit_code)


def print_success(console: Console, message: str, prefix: str = "✓") -> None:
    console.print(f"[green]{prefix}[/green] {message}")


def print_error(console: Console, message: str, prefix: str = "✗") -> None:
    console.print(f"[red]{prefix}[/red] {message}")


def print_warning(console: Console, message: str, prefix: str = "⚠") -> None:
    console.print(f"[yellow]{prefix}[/yellow] {message}")


def print_info(console: Console, message: str, prefix: str = "ℹ") -> None:
    console.print(f"[cyan]{prefix}[/cyan] {message}")
