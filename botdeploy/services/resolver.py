"""Workspace unit resolution."""
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

from botdeploy.core.config import DEFAULT_TARGET
from botdeploy.core.errors import UnitNotFound
from botdeploy.models.unit import DeployableUnit

# Config files shipped alongside each unit's binary, in copy order.
UNIT_CONFIG_FILES: Dict[str, Tuple[str, ...]] = {
    'cleanup-bot': ('.env', 'config.toml'),
    'summarizer-bot': ('.env',),
}
DEFAULT_CONFIG_FILES: Tuple[str, ...] = ('.env',)

UNIT_MANIFEST = 'Cargo.toml'
UNIT_SUFFIX = '-bot'


def config_files_for(
    name: str,
    overrides: Optional[Mapping[str, Tuple[str, ...]]] = None,
) -> Tuple[str, ...]:
    """Return the config-file set for a unit.

    Workspace overrides win over the built-in table; unknown units get
    DEFAULT_CONFIG_FILES.
    """
    if overrides and name in overrides:
        return tuple(overrides[name])
    return UNIT_CONFIG_FILES.get(name, DEFAULT_CONFIG_FILES)


class TargetResolver:
    """Validates unit names against the workspace."""

    def __init__(
        self,
        workspace: Path,
        units: Optional[Mapping[str, Tuple[str, ...]]] = None,
        target: str = DEFAULT_TARGET,
    ):
        self.workspace = Path(workspace)
        self.units = dict(units or {})
        self.target = target

    def resolve(self, name: str) -> DeployableUnit:
        """Resolve a unit name to a DeployableUnit.

        Raises:
            UnitNotFound: If <workspace>/<name> is not a directory. The error
                lists the units that do exist.
        """
        if not name or name in {'.', '..'} or '/' in name or not (self.workspace / name).is_dir():
            raise UnitNotFound(name, self.workspace, self.available_units())

        return DeployableUnit(
            name=name,
            workspace=self.workspace,
            config_files=config_files_for(name, self.units),
            target=self.target,
        )

    def available_units(self) -> List[str]:
        """List workspace directories that look like units.

        A directory counts when it has a Cargo manifest or its name ends
        with '-bot'.
        """
        if not self.workspace.is_dir():
            return []

        return sorted(
            entry.name
            for entry in self.workspace.iterdir()
            if entry.is_dir()
            and not entry.name.startswith('.')
            and ((entry / UNIT_MANIFEST).is_file() or entry.name.endswith(UNIT_SUFFIX))
        )
