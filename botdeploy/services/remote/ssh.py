"""Remote host access through the ssh and scp clients."""
import shlex
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from botdeploy.core.errors import RemoteOperationError
from botdeploy.core.logger import get_logger
from .base import CommandResult, RemoteFileSystem

logger = get_logger(__name__)

# ssh reserves 255 for its own failures (connection refused, auth, ...)
SSH_ERROR_EXIT = 255


class SSHRemoteHost(RemoteFileSystem):
    """RemoteFileSystem backed by the system ssh/scp binaries.

    Authentication, host keys and connection reuse come from the user's
    ssh configuration; no timeouts are set beyond what ssh itself applies.
    """

    def __init__(self, ssh_host: str, ssh_options: Optional[Sequence[str]] = None, mock: bool = False):
        """Initialize SSH host.

        Args:
            ssh_host: Destination as accepted by ssh (user@host or alias)
            ssh_options: Extra arguments valid for both ssh and scp (e.g. ['-o', 'BatchMode=yes'])
            mock: If True, log commands instead of running them
        """
        super().__init__(mock=mock)
        self.ssh_host = ssh_host
        self.ssh_options = list(ssh_options or [])

    @property
    def host(self) -> str:
        return self.ssh_host

    def _ssh_cmd(self, remote_command: str) -> List[str]:
        return ['ssh', *self.ssh_options, self.ssh_host, remote_command]

    def _scp_cmd(self, local_path: Path, remote_path: str) -> List[str]:
        return ['scp', *self.ssh_options, str(local_path), f'{self.ssh_host}:{remote_path}']

    @staticmethod
    def _remote_command(command: Sequence[str], sudo: bool) -> str:
        argv = ['sudo', *command] if sudo else list(command)
        return shlex.join(argv)

    def _execute(self, cmd: List[str], check: bool, description: str) -> CommandResult:
        if self.mock:
            logger.info(f"MOCK: Would run {shlex.join(cmd)}")
            return CommandResult(command=cmd, returncode=0)

        logger.debug(f"Command: {shlex.join(cmd)}")
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except FileNotFoundError:
            raise RemoteOperationError(f"{description} failed: '{cmd[0]}' not found on PATH", cmd)

        result = CommandResult(
            command=cmd,
            returncode=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
        )
        if check and not result.ok:
            raise RemoteOperationError(
                f"{description} failed on {self.ssh_host} (exit {result.returncode})",
                command=cmd,
                returncode=result.returncode,
                stderr=result.stderr,
            )
        return result

    def run(self, command: Sequence[str], sudo: bool = False, check: bool = True) -> CommandResult:
        remote_command = self._remote_command(command, sudo)
        return self._execute(self._ssh_cmd(remote_command), check, f"'{remote_command}'")

    def exists(self, path: str) -> bool:
        if self.mock:
            logger.info(f"MOCK: Would check for {path} on {self.ssh_host}")
            return False

        result = self.run(['test', '-f', path], check=False)
        if result.returncode == SSH_ERROR_EXIT:
            raise RemoteOperationError(
                f"Could not reach {self.ssh_host} to check {path}",
                command=result.command,
                returncode=result.returncode,
                stderr=result.stderr,
            )
        return result.ok

    def copy(self, local_path: Path, remote_path: str) -> None:
        self._execute(
            self._scp_cmd(local_path, remote_path),
            check=True,
            description=f"Copying {Path(local_path).name}",
        )

    def move(self, sources: Sequence[str], dest_dir: str, sudo: bool = True) -> None:
        if not sources:
            return
        self.run(['mv', '-f', *sources, dest_dir.rstrip('/') + '/'], sudo=sudo)

    def make_dirs(self, path: str, owner: Optional[str] = None, sudo: bool = True) -> None:
        self.run(['mkdir', '-p', path], sudo=sudo)
        if owner:
            self.run(['chown', f'{owner}:{owner}', path], sudo=sudo)

    def reset_dir(self, path: str) -> None:
        if not path or path.rstrip('/') == '':
            raise ValueError(f"Refusing to reset remote directory '{path}'")
        self.run(['rm', '-rf', path])
        self.run(['mkdir', '-p', path])
