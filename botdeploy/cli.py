#!/usr/bin/env python3
"""botdeploy CLI - ship workspace units to remote hosts over SSH."""

import typer
from rich.console import Console

from botdeploy.cli_deploy_commands import register_deploy_commands

app = typer.Typer(
    name="botdeploy",
    help="""botdeploy - ship workspace units to systemd hosts over SSH

Quick start:
  botdeploy units                                    # What can be deployed
  botdeploy install cleanup-bot pi@raspberrypi.local pi
  botdeploy deploy cleanup-bot pi@raspberrypi.local
""",
    add_completion=False,
)

console = Console()

register_deploy_commands(app, console)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
