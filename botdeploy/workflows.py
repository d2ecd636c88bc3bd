"""Install and deploy workflows.

install: validate -> render -> transfer (unit file) -> register -> enable
deploy:  validate -> build -> transfer (binary + configs) -> stop -> install -> start

Both run strictly in sequence against one unit and one host. A failure
after remote changes began is not rolled back: an interrupted deploy can
leave the service stopped with the new files still in staging.
"""
import shutil
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from botdeploy.core.config import BotDeploySettings
from botdeploy.core.errors import ArgumentError
from botdeploy.core.logger import get_logger
from botdeploy.core.workflow import Step, StepResult, Workflow
from botdeploy.models.unit import DeployableUnit, RemoteLayout, RemoteTarget, TransferReport
from botdeploy.services.builder import ArtifactBuilder
from botdeploy.services.remote import (
    RemoteFileSystem,
    RemoteInstaller,
    RemoteTransferAgent,
    ServiceLifecycleController,
    SSHRemoteHost,
)
from botdeploy.services.renderer import TemplateRenderer
from botdeploy.services.resolver import TargetResolver

logger = get_logger(__name__)


@dataclass
class DeployOutcome:
    """Result of a completed deploy run."""
    unit: Optional[DeployableUnit] = None
    layout: Optional[RemoteLayout] = None
    binary_path: Optional[Path] = None
    report: Optional[TransferReport] = None
    steps: List[StepResult] = field(default_factory=list)

    @property
    def stopped(self) -> bool:
        """True if the previous instance was stopped cleanly."""
        return any(r.step == Step.STOP and r.ok for r in self.steps)


@dataclass
class InstallOutcome:
    """Result of a completed install run."""
    unit: Optional[DeployableUnit] = None
    layout: Optional[RemoteLayout] = None
    unit_file: str = ""
    remote_unit_file: str = ""
    steps: List[StepResult] = field(default_factory=list)


class _RemoteWorkflow:
    """Shared wiring for workflows that talk to one remote host."""

    def __init__(
        self,
        settings: BotDeploySettings,
        remote: Optional[RemoteFileSystem] = None,
        mock: bool = False,
    ):
        self.settings = settings
        self.remote = remote
        self.mock = mock
        self.resolver = TargetResolver(settings.workspace, settings.units, settings.target)

    def _connect(self, target: RemoteTarget) -> RemoteFileSystem:
        if self.remote is not None:
            return self.remote
        return SSHRemoteHost(target.ssh_host, self.settings.ssh_options, mock=self.mock)


class DeployWorkflow(_RemoteWorkflow):
    """Build a unit and roll it out to a host that already has it installed."""

    def __init__(
        self,
        settings: BotDeploySettings,
        remote: Optional[RemoteFileSystem] = None,
        builder: Optional[ArtifactBuilder] = None,
        mock: bool = False,
    ):
        super().__init__(settings, remote=remote, mock=mock)
        self.builder = builder or ArtifactBuilder(settings.workspace, settings.cargo, mock=mock)

    def run(self, unit_name: str, target: RemoteTarget) -> DeployOutcome:
        """Deploy unit_name to target.

        Raises:
            ValidationError: Unit not found (nothing touched)
            BuildError: Build failed or binary missing (host not touched)
            RemoteOperationError: Any remote step other than stop failed
        """
        remote = self._connect(target)
        lifecycle = ServiceLifecycleController(remote)
        agent = RemoteTransferAgent(remote)
        installer = RemoteInstaller(remote, lifecycle)
        outcome = DeployOutcome()

        def validate():
            outcome.unit = self.resolver.resolve(unit_name)
            outcome.layout = RemoteLayout.from_settings(unit_name, self.settings)
            logger.info(f"Deploying {unit_name} to {target.ssh_host}")
            return outcome.unit

        def build():
            outcome.binary_path = self.builder.build(outcome.unit)
            return outcome.binary_path

        def transfer():
            outcome.report = agent.stage_release(outcome.unit, outcome.layout, outcome.binary_path)
            return outcome.report

        workflow = Workflow("deploy")
        workflow.add(Step.VALIDATE, validate)
        workflow.add(Step.BUILD, build)
        workflow.add(Step.TRANSFER, transfer)
        workflow.add(Step.STOP, lambda: lifecycle.stop(unit_name), succeeded=bool)
        workflow.add(
            Step.INSTALL,
            lambda: installer.install_release(outcome.layout, outcome.report.staged),
        )
        workflow.add(Step.START, lambda: lifecycle.start(unit_name))

        try:
            workflow.run()
        finally:
            outcome.steps = list(workflow.results)

        logger.info(f"✓ Deployment of {unit_name} complete")
        return outcome


class InstallWorkflow(_RemoteWorkflow):
    """Register a unit with the remote service manager for the first time."""

    def __init__(
        self,
        settings: BotDeploySettings,
        remote: Optional[RemoteFileSystem] = None,
        renderer: Optional[TemplateRenderer] = None,
        mock: bool = False,
    ):
        super().__init__(settings, remote=remote, mock=mock)
        self.renderer = renderer or TemplateRenderer()

    def run(self, unit_name: str, target: RemoteTarget) -> InstallOutcome:
        """Install unit_name's service definition on target.

        The unit is enabled but not started.

        Raises:
            ArgumentError: target has no service user
            ValidationError: Unit or template not found, or template
                rendering left placeholders (nothing touched)
            RemoteOperationError: Any remote step failed
        """
        if not target.user:
            raise ArgumentError("install needs the remote user that will run the service")

        remote = self._connect(target)
        lifecycle = ServiceLifecycleController(remote)
        agent = RemoteTransferAgent(remote)
        installer = RemoteInstaller(remote, lifecycle)
        outcome = InstallOutcome()
        scratch_dir = Path(tempfile.mkdtemp(prefix="botdeploy-"))
        rendered: List[Path] = []

        def validate():
            outcome.unit = self.resolver.resolve(unit_name)
            outcome.layout = RemoteLayout.from_settings(unit_name, self.settings)
            logger.info(f"Installing {unit_name} service on {target.ssh_host}...")
            return outcome.unit

        def render():
            path = self.renderer.render_to_file(
                self.settings.template_path,
                {'unit_name': unit_name, 'user': target.user},
                scratch_dir,
                outcome.layout.unit_file_name,
            )
            rendered.append(path)
            outcome.unit_file = path.read_text()
            return path

        def transfer():
            outcome.remote_unit_file = agent.stage_unit_file(rendered[0], outcome.layout)
            return outcome.remote_unit_file

        workflow = Workflow("install")
        workflow.add(Step.VALIDATE, validate)
        workflow.add(Step.RENDER, render)
        workflow.add(Step.TRANSFER, transfer)
        workflow.add(Step.REGISTER, lambda: installer.register_service(outcome.layout, target.user))
        workflow.add(Step.ENABLE, lambda: lifecycle.enable(unit_name))

        try:
            workflow.run()
        finally:
            outcome.steps = list(workflow.results)
            shutil.rmtree(scratch_dir, ignore_errors=True)

        logger.info(f"✓ Installation of {unit_name} complete")
        return outcome
