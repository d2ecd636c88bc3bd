"""botdeploy runtime configuration and settings."""
import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from botdeploy.core.errors import ValidationError
from botdeploy.core.logger import get_logger

logger = get_logger(__name__)

DEFAULT_TARGET = "aarch64-unknown-linux-gnu"
SETTINGS_FILENAME = "botdeploy.yml"
TEMPLATE_FILENAME = "bot.service.template"

_REMOTE_KEYS = ("staging_root", "install_root", "state_root", "unit_dir")


@dataclass
class BotDeploySettings:
    """Runtime configuration for install and deploy runs.

    Attributes:
        workspace: Root of the Cargo workspace holding one directory per unit
        target: Platform triple the release binary is cross-compiled for
        cargo: Build toolchain executable
        ssh_options: Extra arguments passed to both ssh and scp
        staging_root: Remote directory holding per-unit staging directories
        install_root: Remote directory holding per-unit install directories
        state_root: Remote directory holding per-unit runtime state
        unit_dir: Remote service-manager unit directory
        template_path: Service unit template (defaults to <workspace>/bot.service.template)
        units: Config-file overrides keyed by unit name
    """

    workspace: Path = field(default_factory=Path.cwd)
    target: str = DEFAULT_TARGET
    cargo: str = "cargo"
    ssh_options: List[str] = field(default_factory=list)

    staging_root: str = "/tmp"
    install_root: str = "/opt"
    state_root: str = "/var/lib"
    unit_dir: str = "/etc/systemd/system"

    template_path: Optional[Path] = None
    units: Dict[str, Tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self):
        self.workspace = Path(self.workspace)
        if self.template_path is None:
            self.template_path = self.workspace / TEMPLATE_FILENAME
        else:
            self.template_path = Path(self.template_path)

    @classmethod
    def load(cls, workspace: Optional[Path] = None) -> "BotDeploySettings":
        """Build settings from defaults, the workspace YAML file and the environment.

        Precedence is environment > botdeploy.yml > defaults.

        Environment variables:
            BOTDEPLOY_TARGET: Platform triple
            BOTDEPLOY_CARGO: Build toolchain executable
            BOTDEPLOY_SSH_OPTIONS: Extra ssh/scp arguments (shell-quoted string)
            BOTDEPLOY_STAGING_ROOT, BOTDEPLOY_INSTALL_ROOT,
            BOTDEPLOY_STATE_ROOT, BOTDEPLOY_UNIT_DIR: Remote layout roots

        Returns:
            BotDeploySettings instance
        """
        workspace = Path(workspace) if workspace else Path.cwd()
        values: Dict[str, Any] = {"workspace": workspace}
        values.update(load_settings_file(workspace / SETTINGS_FILENAME))
        values.update(_values_from_env())
        return cls(**values)


def load_settings_file(path: Path) -> Dict[str, Any]:
    """Read the optional workspace settings file.

    Example botdeploy.yml:

        target: aarch64-unknown-linux-gnu
        remote:
          install_root: /opt
        units:
          cleanup-bot:
            config_files: [.env, config.toml]

    Raises:
        ValidationError: If the file is not valid YAML or has the wrong shape
    """
    if not path.exists():
        return {}

    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid YAML in {path}: {e}")

    if not isinstance(raw, dict):
        raise ValidationError(f"{path} must contain a mapping at the top level")

    values: Dict[str, Any] = {}

    if raw.get("target"):
        values["target"] = str(raw["target"])
    if raw.get("cargo"):
        values["cargo"] = str(raw["cargo"])

    ssh_options = raw.get("ssh_options")
    if ssh_options:
        if isinstance(ssh_options, str):
            values["ssh_options"] = shlex.split(ssh_options)
        elif isinstance(ssh_options, list):
            values["ssh_options"] = [str(opt) for opt in ssh_options]
        else:
            raise ValidationError(f"'ssh_options' in {path} must be a string or a list")

    remote = raw.get("remote") or {}
    if not isinstance(remote, dict):
        raise ValidationError(f"'remote' in {path} must be a mapping")
    for key in _REMOTE_KEYS:
        if remote.get(key):
            values[key] = str(remote[key]).rstrip("/") or "/"

    units = raw.get("units") or {}
    if not isinstance(units, dict):
        raise ValidationError(f"'units' in {path} must be a mapping")
    parsed_units = {}
    for name, entry in units.items():
        files = (entry or {}).get("config_files") if isinstance(entry, dict) else None
        if not isinstance(files, list):
            raise ValidationError(
                f"Unit '{name}' in {path} needs a 'config_files' list"
            )
        parsed_units[str(name)] = tuple(str(f) for f in files)
    if parsed_units:
        values["units"] = parsed_units

    logger.debug(f"Loaded settings from {path}")
    return values


def _values_from_env() -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    if os.getenv("BOTDEPLOY_TARGET"):
        values["target"] = os.environ["BOTDEPLOY_TARGET"]
    if os.getenv("BOTDEPLOY_CARGO"):
        values["cargo"] = os.environ["BOTDEPLOY_CARGO"]
    if os.getenv("BOTDEPLOY_SSH_OPTIONS"):
        values["ssh_options"] = shlex.split(os.environ["BOTDEPLOY_SSH_OPTIONS"])
    for key in _REMOTE_KEYS:
        env_value = os.getenv(f"BOTDEPLOY_{key.upper()}")
        if env_value:
            values[key] = env_value.rstrip("/") or "/"
    return values
