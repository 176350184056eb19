"""Tests for tempgroup.core.logging and tempgroup.core.timing."""

import json

import pytest
import structlog
from structlog.testing import capture_logs

from tempgroup.core.logging import LogContext, configure_logging, get_logger, is_configured
from tempgroup.core.timing import log_step


class TestConfigure:
    def test_json_output(self, capsys):
        configure_logging(level="INFO", json_format=True, force=True)
        get_logger("tempgroup.test").info("job.started", chunk_size=10)

        line = capsys.readouterr().err.strip().splitlines()[-1]
        payload = json.loads(line)
        assert payload["event"] == "job.started"
        assert payload["chunk_size"] == 10
        assert payload["level"] == "info"
        assert "timestamp" in payload

    def test_level_filtering(self, capsys):
        configure_logging(level="WARNING", json_format=True, force=True)
        get_logger("tempgroup.test").info("hidden")
        assert "hidden" not in capsys.readouterr().err

    def test_configure_once(self):
        configure_logging(level="INFO", force=True)
        assert is_configured()
        configure_logging(level="DEBUG")  # no-op

    def test_context_is_merged(self, capsys):
        configure_logging(level="INFO", json_format=True, force=True)
        with LogContext(execution_id="abc", job="grouping"):
            get_logger("tempgroup.test").info("step.started")
        get_logger("tempgroup.test").info("after")

        lines = [json.loads(line) for line in capsys.readouterr().err.strip().splitlines()]
        assert lines[-2]["execution_id"] == "abc"
        assert lines[-2]["job"] == "grouping"
        assert "execution_id" not in lines[-1]


class TestLogContext:
    def test_binds_and_unbinds(self):
        with LogContext(step="grouping"):
            assert structlog.contextvars.get_contextvars()["step"] == "grouping"
        assert "step" not in structlog.contextvars.get_contextvars()


class TestTiming:
    def test_log_step_success(self):
        with capture_logs() as logs:
            with log_step("finalization.reconcile", accounts=4) as timer:
                timer.add_metric("rows_updated", 9)

        assert [entry["event"] for entry in logs] == [
            "finalization.reconcile.start",
            "finalization.reconcile.end",
        ]
        end = logs[-1]
        assert end["accounts"] == 4
        assert end["rows_updated"] == 9
        assert "duration_ms" in end

    def test_log_step_error(self):
        with capture_logs() as logs:
            with pytest.raises(RuntimeError):
                with log_step("grouping.step", log_start=False):
                    raise RuntimeError("boom")

        assert len(logs) == 1
        entry = logs[0]
        assert entry["event"] == "grouping.step.error"
        assert entry["error_type"] == "RuntimeError"
        assert entry["status"] == "error"
