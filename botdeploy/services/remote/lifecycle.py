"""Remote service lifecycle management (stop, start, enable)."""
from botdeploy.core.errors import RemoteOperationError
from botdeploy.core.logger import get_logger
from .base import CommandResult, RemoteFileSystem

logger = get_logger(__name__)


class ServiceLifecycleController:
    """Drives systemd on the remote host."""

    def __init__(self, remote: RemoteFileSystem):
        self.remote = remote

    def _systemctl(self, *args: str) -> CommandResult:
        return self.remote.run(['systemctl', *args], sudo=True)

    def stop(self, name: str) -> bool:
        """Stop a service, best effort.

        A failure here usually means the service was never running, so it
        is logged and swallowed.

        Returns:
            True if stopped, False if the stop command failed
        """
        logger.info(f"Stopping {name} service...")
        try:
            self._systemctl('stop', name)
        except RemoteOperationError as e:
            logger.warning(f"Could not stop {name} (service may not have been running): {e}")
            return False
        logger.info(f"✓ {name} stopped")
        return True

    def start(self, name: str) -> None:
        """Start a service.

        No readiness probe follows; success is systemctl's exit status.

        Raises:
            RemoteOperationError: If the service failed to start
        """
        logger.info(f"Starting {name} service...")
        self._systemctl('start', name)
        logger.info(f"✓ {name} started")

    def enable(self, name: str) -> None:
        """Enable a service at boot without starting it.

        Raises:
            RemoteOperationError: If systemctl enable fails
        """
        logger.info(f"Enabling {name} service...")
        self._systemctl('enable', name)
        logger.info(f"✓ {name} enabled")

    def daemon_reload(self) -> None:
        """Reload unit definitions.

        Raises:
            RemoteOperationError: If systemctl daemon-reload fails
        """
        self._systemctl('daemon-reload')

    def status(self, name: str) -> CommandResult:
        """Return `systemctl status` for a service.

        systemctl exits non-zero for inactive units, so the result is
        returned rather than raised.
        """
        return self.remote.run(['systemctl', 'status', '--no-pager', name], check=False)
