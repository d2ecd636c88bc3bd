"""Error taxonomy for install and deploy runs.

The class of an error tells the operator how far a run got:

- ArgumentError: usage violation, nothing was touched
- ValidationError: unit or template problem, nothing was touched
- BuildError: local toolchain problem, the remote host was not touched
- RemoteOperationError: the remote host may already be partially updated
"""
from pathlib import Path
from typing import List, Optional, Sequence


class BotDeployError(Exception):
    """Base class for all botdeploy failures.

    Attributes:
        step: Workflow step that was running when the error was raised
            (set by the workflow engine, None outside a workflow)
    """

    step = None


class ArgumentError(BotDeployError):
    """Raised when command arguments are malformed."""
    pass


class ValidationError(BotDeployError):
    """Raised when a unit or its template fails validation."""
    pass


class UnitNotFound(ValidationError):
    """Raised when a unit directory does not exist in the workspace."""

    def __init__(self, name: str, workspace: Path, available: Sequence[str] = ()):
        self.name = name
        self.workspace = Path(workspace)
        self.available: List[str] = list(available)
        super().__init__(f"Unit '{name}' not found in workspace {self.workspace}")


class TemplateNotFound(ValidationError):
    """Raised when the service template file is missing."""

    def __init__(self, path: Path):
        self.path = Path(path)
        super().__init__(f"Service template not found at {self.path}")


class TemplateSubstitutionIncomplete(ValidationError):
    """Raised when placeholder tokens survive rendering."""

    def __init__(self, path: Path, tokens: Sequence[str]):
        self.path = Path(path)
        self.tokens: List[str] = list(tokens)
        super().__init__(
            f"Template {self.path} still contains unresolved placeholders: "
            f"{', '.join(self.tokens)}"
        )


class BuildError(BotDeployError):
    """Raised when the release artifact could not be produced."""
    pass


class BuildFailed(BuildError):
    """Raised when the build toolchain exits unsuccessfully."""

    def __init__(self, unit_name: str, returncode: int, detail: Optional[str] = None):
        self.unit_name = unit_name
        self.returncode = returncode
        message = f"Build of '{unit_name}' failed with exit code {returncode}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class BuildArtifactMissing(BuildError):
    """Raised when the toolchain succeeded but the binary is not on disk."""

    def __init__(self, unit_name: str, path: Path):
        self.unit_name = unit_name
        self.path = Path(path)
        super().__init__(f"Binary for '{unit_name}' not found at {self.path}")


class RemoteOperationError(BotDeployError):
    """Raised when an ssh, scp or service-manager command fails."""

    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        stderr: Optional[str] = None,
    ):
        self.command = list(command) if command else []
        self.returncode = returncode
        self.stderr = stderr or ""
        if self.stderr.strip():
            message = f"{message}: {self.stderr.strip()}"
        super().__init__(message)
