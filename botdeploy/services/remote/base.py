"""Abstract base class for remote hosts."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence


@dataclass
class CommandResult:
    """Outcome of one remote command."""
    command: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class RemoteFileSystem(ABC):
    """Capabilities the workflows need from a remote host.

    Every mutating call either succeeds or raises RemoteOperationError.
    """

    def __init__(self, mock: bool = False):
        """Initialize remote host.

        Args:
            mock: If True, log operations instead of performing them
        """
        self.mock = mock

    @property
    @abstractmethod
    def host(self) -> str:
        """Destination label used in log output."""
        pass

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Check whether a regular file exists at path.

        Raises:
            RemoteOperationError: If the host could not be queried
        """
        pass

    @abstractmethod
    def copy(self, local_path: Path, remote_path: str) -> None:
        """Copy a local file to remote_path (a file path or an existing directory)."""
        pass

    @abstractmethod
    def move(self, sources: Sequence[str], dest_dir: str, sudo: bool = True) -> None:
        """Move remote files into dest_dir, replacing files of the same name."""
        pass

    @abstractmethod
    def make_dirs(self, path: str, owner: Optional[str] = None, sudo: bool = True) -> None:
        """Create path (and parents); chown it to owner:owner when owner is given."""
        pass

    @abstractmethod
    def reset_dir(self, path: str) -> None:
        """Remove path and everything under it, then recreate it empty."""
        pass

    @abstractmethod
    def run(self, command: Sequence[str], sudo: bool = False, check: bool = True) -> CommandResult:
        """Run a command on the remote host.

        Args:
            command: Argument vector, quoted for the remote shell by the implementation
            sudo: Prefix the command with sudo
            check: Raise RemoteOperationError on non-zero exit

        Returns:
            CommandResult
        """
        pass
