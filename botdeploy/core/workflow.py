"""Sequential workflow engine with per-step failure policy.

A workflow is an ordered list of steps. Each step runs only after the
previous one completed. A failing step either aborts the run (the error is
tagged with the step and re-raised, nothing is rolled back) or, for steps
whose policy is WARN, is logged and the run continues.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from botdeploy.core.errors import BotDeployError, RemoteOperationError
from botdeploy.core.logger import get_logger

logger = get_logger(__name__)


class Step(str, Enum):
    """Workflow steps, in the order they can appear."""
    VALIDATE = "validate"
    RENDER = "render"
    BUILD = "build"
    TRANSFER = "transfer"
    STOP = "stop"
    INSTALL = "install"
    REGISTER = "register"
    START = "start"
    ENABLE = "enable"


class FailurePolicy(str, Enum):
    ABORT = "abort"
    WARN = "warn"


# Steps not listed here abort on failure.
STEP_POLICIES: Dict[Step, FailurePolicy] = {
    Step.STOP: FailurePolicy.WARN,
}


def policy_for(step: Step) -> FailurePolicy:
    return STEP_POLICIES.get(step, FailurePolicy.ABORT)


class StepStatus(str, Enum):
    OK = "ok"
    WARNED = "warned"
    FAILED = "failed"


@dataclass
class StepResult:
    """Outcome of one executed step."""
    step: Step
    status: StepStatus
    value: Any = None
    error: Optional[BotDeployError] = None

    @property
    def ok(self) -> bool:
        return self.status == StepStatus.OK


class Workflow:
    """Runs steps in order, applying each step's failure policy.

    Example:
        workflow = Workflow("deploy")
        workflow.add(Step.BUILD, build)
        workflow.add(Step.STOP, stop, succeeded=bool)
        results = workflow.run()
    """

    def __init__(self, name: str):
        self.name = name
        self.steps: List[Tuple[Step, Callable[[], Any], Optional[Callable[[Any], bool]]]] = []
        self.results: List[StepResult] = []

    def add(
        self,
        step: Step,
        action: Callable[[], Any],
        succeeded: Optional[Callable[[Any], bool]] = None,
    ) -> "Workflow":
        """Append a step.

        Args:
            step: Step identity, which selects the failure policy
            action: Zero-argument callable doing the work
            succeeded: Optional predicate on the action's return value; a
                False verdict records the step as WARNED instead of OK
        """
        self.steps.append((step, action, succeeded))
        return self

    def run(self) -> List[StepResult]:
        """Execute all steps.

        Returns:
            One StepResult per step

        Raises:
            BotDeployError: The first error from an ABORT step, with
                error.step set to the failing step
        """
        self.results = []

        for step, action, succeeded in self.steps:
            logger.debug(f"[{self.name}] step {step.value}")
            try:
                value = action()
            except RemoteOperationError as e:
                if policy_for(step) == FailurePolicy.WARN:
                    logger.warning(f"{step.value} failed, continuing: {e}")
                    self.results.append(StepResult(step, StepStatus.WARNED, error=e))
                    continue
                self._abort(step, e)
            except BotDeployError as e:
                self._abort(step, e)

            status = StepStatus.OK
            if succeeded is not None and not succeeded(value):
                status = StepStatus.WARNED
            self.results.append(StepResult(step, status, value=value))

        return self.results

    def _abort(self, step: Step, error: BotDeployError) -> None:
        error.step = step
        self.results.append(StepResult(step, StepStatus.FAILED, error=error))
        logger.debug(f"[{self.name}] aborted at step {step.value}: {error}")
        raise error
