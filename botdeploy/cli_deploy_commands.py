"""install, deploy, units and status commands for the botdeploy CLI."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from botdeploy.cli_support import (
    UsageErrorCommand,
    handle_cli_error,
    is_mock,
    load_settings,
    print_error,
    print_info,
    print_success,
    print_warning,
    setup_logging,
)
from botdeploy.core.errors import BotDeployError
from botdeploy.models.unit import RemoteTarget, TransferOutcome
from botdeploy.services.remote import ServiceLifecycleController, SSHRemoteHost
from botdeploy.services.remote.ssh import SSH_ERROR_EXIT
from botdeploy.services.resolver import TargetResolver, config_files_for
from botdeploy.workflows import DeployWorkflow, InstallWorkflow

console = Console()

_OUTCOME_STYLES = {
    TransferOutcome.COPIED: "[green]copied[/green]",
    TransferOutcome.SKIPPED: "[yellow]skipped (already on remote)[/yellow]",
    TransferOutcome.ABSENT: "[dim]not present locally[/dim]",
}

WORKSPACE_HELP = "Workspace root (default: $BOTDEPLOY_WORKSPACE or current directory)"


def register_deploy_commands(app: typer.Typer, shared_console: Console) -> None:
    """Attach the deployment commands to the main Typer app."""
    global console
    console = shared_console

    app.command("install", cls=UsageErrorCommand)(install)
    app.command("deploy", cls=UsageErrorCommand)(deploy)
    app.command("units")(units)
    app.command("status", cls=UsageErrorCommand)(status)


def install(
    unit: str = typer.Argument(..., help="Unit name (a directory in the workspace)"),
    ssh_host: str = typer.Argument(..., help="SSH host, e.g. pi@raspberrypi.local"),
    user: str = typer.Argument(..., help="User to run the service as on the remote host"),
    workspace: Optional[Path] = typer.Option(None, "--workspace", "-w", help=WORKSPACE_HELP),
    template: Optional[Path] = typer.Option(
        None, "--template", "-t", help="Service template (default: <workspace>/bot.service.template)"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Log remote commands without running them"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug output"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Log file (default: ~/.local/state/botdeploy/botdeploy.log)"),
) -> None:
    """Install a unit's systemd service on a remote host (enabled, not started).

    Example: botdeploy install cleanup-bot pi@raspberrypi.local pi
    """
    setup_logging(log_file, verbose)
    mock = dry_run or is_mock()

    try:
        target = RemoteTarget(ssh_host, user=user)
        settings = load_settings(workspace, template)
        outcome = InstallWorkflow(settings, mock=mock).run(unit, target)
    except BotDeployError as e:
        handle_cli_error(e, console, verbose=verbose)

    console.print()
    console.print("[bold]Generated service file:[/bold]")
    console.print(outcome.unit_file, markup=False, highlight=False)
    print_success(console, f"Installation of {unit} complete")
    console.print()
    console.print("The service is enabled but not started. To start it:")
    console.print(f"  ssh {ssh_host} sudo systemctl start {unit}", markup=False)
    console.print("To check status:")
    console.print(f"  ssh {ssh_host} systemctl status {unit}", markup=False)


def deploy(
    unit: str = typer.Argument(..., help="Unit name (a directory in the workspace)"),
    ssh_host: str = typer.Argument(..., help="SSH host, e.g. pi@raspberrypi.local"),
    workspace: Optional[Path] = typer.Option(None, "--workspace", "-w", help=WORKSPACE_HELP),
    dry_run: bool = typer.Option(False, "--dry-run", help="Log build and remote commands without running them"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug output"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Log file (default: ~/.local/state/botdeploy/botdeploy.log)"),
) -> None:
    """Build a unit, copy it to a remote host and restart its service.

    Config files already on the host are never overwritten.

    Example: botdeploy deploy cleanup-bot pi@raspberrypi.local
    """
    setup_logging(log_file, verbose)
    mock = dry_run or is_mock()

    try:
        target = RemoteTarget(ssh_host)
        settings = load_settings(workspace)
        outcome = DeployWorkflow(settings, mock=mock).run(unit, target)
    except BotDeployError as e:
        handle_cli_error(e, console, verbose=verbose)

    table = Table(title=f"{unit} → {ssh_host}:{outcome.layout.install_dir}")
    table.add_column("File", style="cyan")
    table.add_column("Result")
    for filename, result in outcome.report.entries:
        table.add_row(filename, _OUTCOME_STYLES[result])
    console.print(table)

    if not outcome.stopped:
        print_warning(console, f"{unit} was not running before the deploy (stop failed)")
    print_success(console, "Deployment complete!")
    console.print(f"Check status with: ssh {ssh_host} systemctl status {unit}", markup=False)


def units(
    workspace: Optional[Path] = typer.Option(None, "--workspace", "-w", help=WORKSPACE_HELP),
) -> None:
    """List deployable units in the workspace and the config files they ship."""
    try:
        settings = load_settings(workspace)
    except BotDeployError as e:
        handle_cli_error(e, console)

    resolver = TargetResolver(settings.workspace, settings.units, settings.target)
    names = resolver.available_units()
    if not names:
        print_info(console, f"No units found in {settings.workspace}")
        return

    table = Table(title=f"Units in {settings.workspace}")
    table.add_column("Unit", style="cyan")
    table.add_column("Config files")
    for name in names:
        table.add_row(name, ", ".join(config_files_for(name, settings.units)))
    console.print(table)


def status(
    unit: str = typer.Argument(..., help="Unit name"),
    ssh_host: str = typer.Argument(..., help="SSH host, e.g. pi@raspberrypi.local"),
    workspace: Optional[Path] = typer.Option(None, "--workspace", "-w", help=WORKSPACE_HELP),
) -> None:
    """Show systemd status for a unit on a remote host."""
    try:
        target = RemoteTarget(ssh_host)
        settings = load_settings(workspace)
    except BotDeployError as e:
        handle_cli_error(e, console)

    remote = SSHRemoteHost(target.ssh_host, settings.ssh_options, mock=is_mock())
    result = ServiceLifecycleController(remote).status(unit)

    if result.returncode == SSH_ERROR_EXIT:
        print_error(console, f"Could not reach {ssh_host}: {result.stderr.strip()}")
        raise typer.Exit(1)

    console.print(result.stdout, markup=False, highlight=False)
