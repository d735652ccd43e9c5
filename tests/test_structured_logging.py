import json

import pytest

from trackersync.logging import StructuredLogger, configure_logging, get_logger


def _lines(text: str) -> list[str]:
    return [line for line in text.strip().split("\n") if line]


def test_structured_logger_json_format(capsys):
    """JSON mode writes one object per record to stderr."""
    logger = StructuredLogger(name="test", json_logging=True, level="INFO")
    logger.log_operation("export_stage", target="github", stage="verifying")

    captured = capsys.readouterr()
    assert captured.out == ""
    (line,) = _lines(captured.err)
    log_data = json.loads(line)

    assert log_data["level"] == "INFO"
    assert log_data["operation"] == "export_stage"
    assert log_data["target"] == "github"
    assert log_data["stage"] == "verifying"
    assert "timestamp" in log_data


def test_structured_logger_regular_format(capsys):
    logger = StructuredLogger(name="test", json_logging=False, level="INFO")
    logger.log_entity_action("created", "issue", "Build API", key="#12", dry_run=True)

    captured = capsys.readouterr()
    assert "issue created 'Build API' #12 [DRY]" in captured.err
    assert "INFO" in captured.err


def test_level_filters_debug(capsys):
    logger = StructuredLogger(name="test", json_logging=False, level="WARNING")
    logger.info("hidden")
    logger.warning("shown")

    err = capsys.readouterr().err
    assert "hidden" not in err
    assert "shown" in err


def test_timed_operation_logs_duration(capsys):
    logger = StructuredLogger(name="test", json_logging=True, level="INFO")

    with logger.timed_operation("export", target="jira"):
        pass

    records = [json.loads(line) for line in _lines(capsys.readouterr().err)]
    assert [r["operation"] for r in records] == ["export_start", "export"]
    assert records[1]["duration_ms"] >= 0


def test_timed_operation_logs_and_reraises(capsys):
    logger = StructuredLogger(name="test", json_logging=True, level="INFO")

    with pytest.raises(RuntimeError):
        with logger.timed_operation("export"):
            raise RuntimeError("boom")

    records = [json.loads(line) for line in _lines(capsys.readouterr().err)]
    assert records[-1]["level"] == "ERROR"
    assert records[-1]["error"] == "boom"


def test_configure_logging_replaces_global():
    first = get_logger()
    configured = configure_logging(json_logging=True, level="DEBUG")

    assert configured is get_logger()
    assert configured is not first
