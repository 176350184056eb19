"""Tests for tempgroup.batch.status - state machines and execution records."""

import pytest

from tempgroup.batch.status import (
    JOB_VALID_TRANSITIONS,
    STEP_VALID_TRANSITIONS,
    JobExecution,
    JobStatus,
    StepExecution,
    StepStatus,
    validate_transition,
)
from tempgroup.core.errors import InvalidTransitionError


class TestTransitions:
    def test_every_status_has_entry(self):
        assert set(JOB_VALID_TRANSITIONS) == set(JobStatus)
        assert set(STEP_VALID_TRANSITIONS) == set(StepStatus)

    @pytest.mark.parametrize(
        "current,target",
        [
            (JobStatus.CREATED, JobStatus.RUNNING),
            (JobStatus.RUNNING, JobStatus.COMPLETED),
            (JobStatus.RUNNING, JobStatus.FAILED),
            (StepStatus.PENDING, StepStatus.RUNNING),
            (StepStatus.RUNNING, StepStatus.FAILED),
        ],
    )
    def test_valid(self, current, target):
        validate_transition(current, target)

    @pytest.mark.parametrize(
        "current,target",
        [
            (JobStatus.CREATED, JobStatus.COMPLETED),
            (JobStatus.COMPLETED, JobStatus.RUNNING),
            (JobStatus.FAILED, JobStatus.COMPLETED),
            (StepStatus.PENDING, StepStatus.COMPLETED),
            (StepStatus.COMPLETED, StepStatus.FAILED),
        ],
    )
    def test_invalid(self, current, target):
        with pytest.raises(InvalidTransitionError):
            validate_transition(current, target)

    def test_error_message(self):
        with pytest.raises(InvalidTransitionError, match="JobStatus transition: completed → running"):
            validate_transition(JobStatus.COMPLETED, JobStatus.RUNNING)


class TestStepExecution:
    def test_lifecycle(self):
        step = StepExecution("grouping")
        step.mark_started()
        step.read_count = 9
        step.mark_completed()
        assert step.status == StepStatus.COMPLETED
        assert step.duration_seconds is not None
        assert step.to_dict()["read_count"] == 9

    def test_failure_records_error(self):
        step = StepExecution("grouping")
        step.mark_started()
        step.mark_failed("boom", "ChunkWriteError")
        assert (step.status, step.error, step.error_type) == (StepStatus.FAILED, "boom", "ChunkWriteError")

    def test_cannot_complete_pending(self):
        with pytest.raises(InvalidTransitionError):
            StepExecution("grouping").mark_completed()


class TestJobExecution:
    def test_create(self):
        execution = JobExecution.create("grouping", {"chunk_size": 2}, ["grouping", "finalization"])
        assert execution.status == JobStatus.CREATED
        assert [s.step_name for s in execution.step_executions] == ["grouping", "finalization"]
        assert all(s.status == StepStatus.PENDING for s in execution.step_executions)
        assert len(execution.execution_id) == 36

    def test_ids_unique(self):
        assert JobExecution.create("g").execution_id != JobExecution.create("g").execution_id

    def test_mark_failed(self):
        execution = JobExecution.create("grouping")
        execution.mark_started()
        execution.mark_failed("grouping", "boom", "ChunkWriteError")
        assert execution.status == JobStatus.FAILED
        assert execution.failed_step == "grouping"
        assert not execution.succeeded

    def test_step_lookup(self):
        execution = JobExecution.create("grouping", step_names=["grouping"])
        assert execution.step("grouping").step_name == "grouping"
        with pytest.raises(KeyError):
            execution.step("missing")

    def test_to_dict(self):
        execution = JobExecution.create("grouping", {"chunk_size": 2}, ["grouping"])
        execution.mark_started()
        execution.mark_completed()
        data = execution.to_dict()
        assert data["status"] == "completed"
        assert data["params"] == {"chunk_size": 2}
        assert data["steps"][0]["status"] == "pending"
        assert data["duration_seconds"] >= 0
