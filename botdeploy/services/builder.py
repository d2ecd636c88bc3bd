"""Release builds through the cargo toolchain."""
import subprocess
from pathlib import Path
from typing import List

from botdeploy.core.errors import BuildArtifactMissing, BuildFailed
from botdeploy.core.logger import get_logger
from botdeploy.models.unit import DeployableUnit

logger = get_logger(__name__)


class ArtifactBuilder:
    """Cross-compiles a unit's release binary."""

    def __init__(self, workspace: Path, cargo: str = 'cargo', mock: bool = False):
        self.workspace = Path(workspace)
        self.cargo = cargo
        self.mock = mock

    def build_command(self, unit: DeployableUnit) -> List[str]:
        return [
            self.cargo, 'build', '--release',
            '-p', unit.name,
            '--target', unit.target,
        ]

    def build(self, unit: DeployableUnit) -> Path:
        """Build the unit and return the path of its binary.

        Build output is streamed to the terminal; the call blocks until the
        toolchain exits.

        Args:
            unit: Unit to build

        Returns:
            Path to the release binary

        Raises:
            BuildFailed: If the toolchain is missing or exits non-zero
            BuildArtifactMissing: If the toolchain succeeded but left no binary
        """
        cmd = self.build_command(unit)

        if self.mock:
            logger.info(f"MOCK: Would run {' '.join(cmd)}")
            return unit.binary_path

        logger.info(f"Building {unit.name} for {unit.target}...")
        logger.debug(f"Command: {' '.join(cmd)}")

        try:
            result = subprocess.run(cmd, cwd=self.workspace, check=False)
        except FileNotFoundError:
            raise BuildFailed(unit.name, 127, f"'{self.cargo}' not found on PATH")

        if result.returncode != 0:
            raise BuildFailed(unit.name, result.returncode)

        # cargo can exit 0 without producing this path (e.g. a different
        # target dir configured in .cargo/config.toml)
        if not unit.binary_path.is_file():
            raise BuildArtifactMissing(unit.name, unit.binary_path)

        logger.info(f"✓ Built {unit.binary_path}")
        return unit.binary_path
