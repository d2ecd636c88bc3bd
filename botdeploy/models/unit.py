"""Unit, target and remote layout models."""
import posixpath
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from botdeploy.core.errors import ArgumentError


@dataclass(frozen=True)
class DeployableUnit:
    """A single deployable service living in its own workspace directory."""
    name: str
    workspace: Path
    config_files: Tuple[str, ...] = (".env",)
    target: str = "aarch64-unknown-linux-gnu"

    @property
    def source_dir(self) -> Path:
        return self.workspace / self.name

    @property
    def binary_path(self) -> Path:
        """Where cargo leaves the release binary for this unit and triple."""
        return self.workspace / "target" / self.target / "release" / self.name

    def local_config_path(self, filename: str) -> Path:
        return self.source_dir / filename


@dataclass(frozen=True)
class RemoteTarget:
    """SSH endpoint for one run, plus the service user for installs.

    Attributes:
        ssh_host: Anything ssh accepts as a destination (user@host or an alias)
        user: Remote OS user owning the unit's state directory (install only)
    """
    ssh_host: str
    user: Optional[str] = None

    def __post_init__(self):
        if not self.ssh_host or any(c.isspace() for c in self.ssh_host):
            raise ArgumentError(f"Invalid SSH host: '{self.ssh_host}'")
        if self.user is not None:
            if not self.user or any(c.isspace() for c in self.user) or ":" in self.user:
                raise ArgumentError(f"Invalid remote user: '{self.user}'")


@dataclass(frozen=True)
class RemoteLayout:
    """Remote filesystem contract for one unit.

    Persistent paths are the install directory (binary and config files),
    the state directory and the unit file. Staging paths are scratch space.
    """
    unit_name: str
    staging_root: str = "/tmp"
    install_root: str = "/opt"
    state_root: str = "/var/lib"
    unit_dir: str = "/etc/systemd/system"

    @classmethod
    def from_settings(cls, unit_name: str, settings) -> "RemoteLayout":
        return cls(
            unit_name=unit_name,
            staging_root=settings.staging_root,
            install_root=settings.install_root,
            state_root=settings.state_root,
            unit_dir=settings.unit_dir,
        )

    @property
    def staging_dir(self) -> str:
        return posixpath.join(self.staging_root, self.unit_name)

    @property
    def install_dir(self) -> str:
        return posixpath.join(self.install_root, self.unit_name)

    @property
    def binary_path(self) -> str:
        return posixpath.join(self.install_dir, self.unit_name)

    @property
    def state_dir(self) -> str:
        return posixpath.join(self.state_root, self.unit_name)

    @property
    def unit_file_name(self) -> str:
        return f"{self.unit_name}.service"

    @property
    def unit_file_path(self) -> str:
        return posixpath.join(self.unit_dir, self.unit_file_name)

    @property
    def unit_file_staging_path(self) -> str:
        return posixpath.join(self.staging_root, self.unit_file_name)

    def installed_config_path(self, filename: str) -> str:
        return posixpath.join(self.install_dir, filename)

    def staged_path(self, filename: str) -> str:
        return posixpath.join(self.staging_dir, filename)


class TransferOutcome(str, Enum):
    """What happened to one file during staging."""
    COPIED = "copied"
    SKIPPED = "skipped"  # already present in the install directory
    ABSENT = "absent"  # declared but missing locally


@dataclass
class TransferReport:
    """Per-file outcome of staging a release."""
    unit_name: str
    entries: List[Tuple[str, TransferOutcome]] = field(default_factory=list)

    def record(self, filename: str, outcome: TransferOutcome) -> None:
        self.entries.append((filename, outcome))

    def outcome_for(self, filename: str) -> Optional[TransferOutcome]:
        for name, outcome in self.entries:
            if name == filename:
                return outcome
        return None

    @property
    def staged(self) -> List[str]:
        """Filenames now sitting in the staging directory."""
        return [name for name, outcome in self.entries if outcome == TransferOutcome.COPIED]

    @property
    def skipped(self) -> List[str]:
        return [name for name, outcome in self.entries if outcome == TransferOutcome.SKIPPED]
