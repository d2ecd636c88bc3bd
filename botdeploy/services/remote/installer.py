"""Moving staged files into their final remote locations."""
from typing import Sequence

from botdeploy.core.logger import get_logger
from botdeploy.models.unit import RemoteLayout
from .base import RemoteFileSystem
from .lifecycle import ServiceLifecycleController

logger = get_logger(__name__)


class RemoteInstaller:
    """Materializes staged files on the remote host."""

    def __init__(self, remote: RemoteFileSystem, lifecycle: ServiceLifecycleController):
        self.remote = remote
        self.lifecycle = lifecycle

    def install_release(self, layout: RemoteLayout, staged_files: Sequence[str]) -> None:
        """Move staged release files into the install directory.

        The binary replaces the installed one. Config files only reach
        staging when absent from the install directory, so nothing else
        gets overwritten.

        Args:
            layout: Remote layout for the unit
            staged_files: Filenames sitting in layout.staging_dir

        Raises:
            RemoteOperationError: If the directory or the move fails
        """
        logger.info(f"Installing files to {layout.install_dir}/...")
        self.remote.make_dirs(layout.install_dir)
        self.remote.move([layout.staged_path(name) for name in staged_files], layout.install_dir)
        logger.info(f"✓ Installed {len(staged_files)} file(s)")

    def register_service(self, layout: RemoteLayout, user: str) -> None:
        """Create the state directory and register the staged unit file.

        Args:
            layout: Remote layout for the unit
            user: Remote user that owns the state directory

        Raises:
            RemoteOperationError: On the first failed remote call
        """
        logger.info(f"Installing service on {self.remote.host}...")
        self.remote.make_dirs(layout.state_dir, owner=user)
        self.remote.move([layout.unit_file_staging_path], layout.unit_dir)
        self.lifecycle.daemon_reload()
        logger.info(f"✓ Registered {layout.unit_file_path}")
