"""Staging files on the remote host."""
from pathlib import Path

from botdeploy.core.logger import get_logger
from botdeploy.models.unit import DeployableUnit, RemoteLayout, TransferOutcome, TransferReport
from .base import RemoteFileSystem

logger = get_logger(__name__)


class RemoteTransferAgent:
    """Copies release files into the remote staging area."""

    def __init__(self, remote: RemoteFileSystem):
        self.remote = remote

    def stage_release(
        self,
        unit: DeployableUnit,
        layout: RemoteLayout,
        binary_path: Path,
    ) -> TransferReport:
        """Stage a unit's binary and any config files the host lacks.

        The staging directory is wiped first. The binary is always copied.
        A config file is copied only if it exists locally and is not already
        present in the unit's install directory, so configs and secrets on
        the host are never overwritten by a later deploy.

        Args:
            unit: Unit being deployed
            layout: Remote layout for the unit
            binary_path: Local release binary

        Returns:
            TransferReport with one entry per file

        Raises:
            RemoteOperationError: On the first failed remote call
        """
        report = TransferReport(unit_name=unit.name)

        logger.info(f"Copying files to {self.remote.host}:{layout.staging_dir}...")
        self.remote.reset_dir(layout.staging_dir)

        self.remote.copy(binary_path, layout.staged_path(unit.name))
        report.record(unit.name, TransferOutcome.COPIED)
        logger.info(f"  Copying {unit.name} (binary)")

        for config_file in unit.config_files:
            local_path = unit.local_config_path(config_file)
            if not local_path.is_file():
                logger.debug(f"  {config_file} not present locally, nothing to copy")
                report.record(config_file, TransferOutcome.ABSENT)
                continue

            if self.remote.exists(layout.installed_config_path(config_file)):
                logger.info(f"  Skipping {config_file} (already exists on remote)")
                report.record(config_file, TransferOutcome.SKIPPED)
                continue

            logger.info(f"  Copying {config_file}")
            self.remote.copy(local_path, layout.staged_path(config_file))
            report.record(config_file, TransferOutcome.COPIED)

        return report

    def stage_unit_file(self, local_path: Path, layout: RemoteLayout) -> str:
        """Copy a rendered unit file next to the staging directories.

        Returns:
            Remote path of the staged unit file
        """
        remote_path = layout.unit_file_staging_path
        logger.info(f"Copying service file to {self.remote.host}:{remote_path}...")
        self.remote.copy(local_path, remote_path)
        return remote_path
