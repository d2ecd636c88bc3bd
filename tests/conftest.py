"""Shared test fixtures for botdeploy tests."""
import posixpath
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set, Tuple

import pytest

from botdeploy.core import logger as botdeploy_logger
from botdeploy.core.config import BotDeploySettings
from botdeploy.core.errors import RemoteOperationError
from botdeploy.services.remote.base import CommandResult, RemoteFileSystem

TARGET = "aarch64-unknown-linux-gnu"

SERVICE_TEMPLATE = """[Unit]
Description={{BOT_NAME}} Discord bot
After=network-online.target

[Service]
User={{USER}}
WorkingDirectory=/opt/{{BOT_NAME}}
ExecStart=/opt/{{BOT_NAME}}/{{BOT_NAME}}
Restart=on-failure

[Install]
WantedBy=multi-user.target
"""


class InMemoryRemoteHost(RemoteFileSystem):
    """RemoteFileSystem fake keeping files, directories and systemd state in dicts.

    Failures are scripted with fail_command() / fail_copy().
    """

    def __init__(self, host: str = "user@host"):
        super().__init__(mock=False)
        self._host = host
        self.files: Dict[str, bytes] = {}
        self.dirs: Set[str] = {"/", "/tmp", "/opt", "/var/lib", "/etc", "/etc/systemd", "/etc/systemd/system"}
        self.owners: Dict[str, str] = {}
        self.active: Set[str] = set()
        self.enabled: Set[str] = set()
        self.reloads = 0
        self.calls: List[Tuple] = []
        self._command_failures: Dict[Tuple[str, ...], Tuple[int, str]] = {}
        self._copy_failures: Set[str] = set()

    @property
    def host(self) -> str:
        return self._host

    def fail_command(self, command: Sequence[str], returncode: int = 1, stderr: str = "failed") -> None:
        self._command_failures[tuple(command)] = (returncode, stderr)

    def fail_copy(self, filename: str) -> None:
        self._copy_failures.add(filename)

    def systemctl_calls(self) -> List[str]:
        return [call[1] for call in self.calls if call[0] == "run" and call[1].startswith("systemctl")]

    def exists(self, path: str) -> bool:
        self.calls.append(("exists", path))
        return path in self.files

    def copy(self, local_path: Path, remote_path: str) -> None:
        self.calls.append(("copy", remote_path))
        if remote_path in self.dirs:
            remote_path = posixpath.join(remote_path, Path(local_path).name)
        if Path(local_path).name in self._copy_failures:
            raise RemoteOperationError(f"Copying {Path(local_path).name} failed", ["scp"], 1)
        if posixpath.dirname(remote_path) not in self.dirs:
            raise RemoteOperationError(f"No such remote directory for {remote_path}", ["scp"], 1)
        self.files[remote_path] = Path(local_path).read_bytes()

    def move(self, sources: Sequence[str], dest_dir: str, sudo: bool = True) -> None:
        self.calls.append(("move", tuple(sources), dest_dir))
        if dest_dir not in self.dirs:
            raise RemoteOperationError(f"mv: target '{dest_dir}' is not a directory", ["mv"], 1)
        for source in sources:
            if source not in self.files:
                raise RemoteOperationError(f"mv: cannot stat '{source}'", ["mv"], 1)
            self.files[posixpath.join(dest_dir, posixpath.basename(source))] = self.files.pop(source)

    def make_dirs(self, path: str, owner: Optional[str] = None, sudo: bool = True) -> None:
        self.calls.append(("make_dirs", path, owner))
        self._add_dirs(path)
        if owner:
            self.owners[path] = f"{owner}:{owner}"

    def reset_dir(self, path: str) -> None:
        self.calls.append(("reset_dir", path))
        prefix = path.rstrip("/") + "/"
        self.files = {p: data for p, data in self.files.items() if not p.startswith(prefix)}
        self.dirs = {d for d in self.dirs if not d.startswith(prefix)}
        self._add_dirs(path)

    def _add_dirs(self, path: str) -> None:
        current = path
        while current not in ("", "/"):
            self.dirs.add(current)
            current = posixpath.dirname(current)

    def run(self, command: Sequence[str], sudo: bool = False, check: bool = True) -> CommandResult:
        joined = " ".join(command)
        self.calls.append(("run", joined, sudo))
        returncode, stderr = self._command_failures.get(tuple(command), (0, ""))
        result = CommandResult(command=list(command), returncode=returncode, stderr=stderr)
        if returncode != 0:
            if check:
                raise RemoteOperationError(f"'{joined}' failed", command, returncode, stderr)
            return result

        if list(command[:1]) == ["systemctl"] and len(command) > 2:
            action, name = command[1], command[-1]
            if action == "start":
                self.active.add(name)
            elif action == "stop":
                self.active.discard(name)
            elif action == "enable":
                self.enabled.add(name)
        elif list(command) == ["systemctl", "daemon-reload"]:
            self.reloads += 1
        return result


@pytest.fixture(autouse=True)
def log_file(tmp_path_factory, monkeypatch):
    """Point default file logging at a temporary directory."""
    log_dir = tmp_path_factory.mktemp("logs")
    monkeypatch.setattr(botdeploy_logger, "LOG_FILE", log_dir / "botdeploy.log")
    monkeypatch.setattr(botdeploy_logger, "FALLBACK_LOG_FILE", log_dir / "fallback.log")
    botdeploy_logger.close_file_logging()
    yield log_dir / "botdeploy.log"
    botdeploy_logger.close_file_logging()
    botdeploy_logger.set_verbose(False)


@pytest.fixture
def remote():
    """Empty in-memory remote host."""
    return InMemoryRemoteHost()


@pytest.fixture
def workspace(tmp_path):
    """Cargo workspace with a built sample-bot and a few sibling crates."""
    root = tmp_path / "workspace"
    root.mkdir()
    (root / "Cargo.toml").write_text('[workspace]\nmembers = ["sample-bot", "cleanup-bot", "shared"]\n')

    sample = root / "sample-bot"
    sample.mkdir()
    (sample / "Cargo.toml").write_text('[package]\nname = "sample-bot"\n')
    (sample / ".env").write_text("DISCORD_TOKEN=local-token\n")
    (sample / "config.toml").write_text("interval = 60\n")

    cleanup = root / "cleanup-bot"
    cleanup.mkdir()
    (cleanup / "Cargo.toml").write_text('[package]\nname = "cleanup-bot"\n')

    shared = root / "shared"
    shared.mkdir()
    (shared / "Cargo.toml").write_text('[package]\nname = "shared"\n')

    (root / "docs").mkdir()

    release = root / "target" / TARGET / "release"
    release.mkdir(parents=True)
    (release / "sample-bot").write_bytes(b"\x7fELF new build")

    (root / "bot.service.template").write_text(SERVICE_TEMPLATE)
    return root


@pytest.fixture
def settings(workspace):
    """Settings for the sample workspace with sample-bot shipping two configs."""
    return BotDeploySettings(
        workspace=workspace,
        units={"sample-bot": (".env", "config.toml")},
    )
