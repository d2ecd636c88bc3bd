"""Tests for the sequential workflow engine."""
import pytest

from botdeploy.core.errors import BuildFailed, RemoteOperationError, ValidationError
from botdeploy.core.workflow import (
    FailurePolicy,
    Step,
    StepStatus,
    Workflow,
    policy_for,
)


def test_only_stop_is_best_effort():
    assert policy_for(Step.STOP) == FailurePolicy.WARN
    for step in Step:
        if step is not Step.STOP:
            assert policy_for(step) == FailurePolicy.ABORT


class TestWorkflow:
    """Test Workflow.run ordering and failure handling."""

    def test_runs_steps_in_order(self):
        seen = []
        workflow = Workflow("deploy")
        workflow.add(Step.VALIDATE, lambda: seen.append("validate"))
        workflow.add(Step.BUILD, lambda: seen.append("build") or "binary")

        results = workflow.run()

        assert seen == ["validate", "build"]
        assert [r.step for r in results] == [Step.VALIDATE, Step.BUILD]
        assert all(r.ok for r in results)
        assert results[1].value == "binary"

    def test_abort_tags_error_and_stops(self):
        seen = []

        def build():
            raise BuildFailed("sample-bot", 101)

        workflow = Workflow("deploy")
        workflow.add(Step.VALIDATE, lambda: seen.append("validate"))
        workflow.add(Step.BUILD, build)
        workflow.add(Step.TRANSFER, lambda: seen.append("transfer"))

        with pytest.raises(BuildFailed) as exc_info:
            workflow.run()

        assert exc_info.value.step == Step.BUILD
        assert seen == ["validate"]
        assert workflow.results[-1].status == StepStatus.FAILED

    def test_warn_step_failure_continues(self):
        """A failing stop is recorded and the next step still runs."""
        seen = []

        def stop():
            raise RemoteOperationError("stop failed", returncode=5)

        workflow = Workflow("deploy")
        workflow.add(Step.STOP, stop)
        workflow.add(Step.START, lambda: seen.append("start"))

        results = workflow.run()

        assert seen == ["start"]
        assert results[0].status == StepStatus.WARNED
        assert isinstance(results[0].error, RemoteOperationError)
        assert results[1].ok

    def test_warn_policy_only_covers_remote_errors(self):
        def stop():
            raise ValidationError("bad unit")

        workflow = Workflow("deploy").add(Step.STOP, stop)

        with pytest.raises(ValidationError) as exc_info:
            workflow.run()

        assert exc_info.value.step == Step.STOP

    def test_remote_error_aborts_start(self):
        def start():
            raise RemoteOperationError("start failed", returncode=1)

        workflow = Workflow("deploy").add(Step.START, start)

        with pytest.raises(RemoteOperationError) as exc_info:
            workflow.run()

        assert exc_info.value.step == Step.START

    def test_succeeded_predicate_marks_warning(self):
        workflow = Workflow("deploy").add(Step.STOP, lambda: False, succeeded=bool)

        results = workflow.run()

        assert results[0].status == StepStatus.WARNED
        assert results[0].value is False

    def test_unexpected_exceptions_propagate_untagged(self):
        def broken():
            raise RuntimeError("boom")

        workflow = Workflow("deploy").add(Step.BUILD, broken)

        with pytest.raises(RuntimeError):
            workflow.run()
