"""
Tests for structured logging with correlation ids.
"""

import json
import logging
import sys

import pytest

from collector.logging_config import get_logger, setup_logging
from deploy_events.core.events import DeploymentEvent
from deploy_events.log.store import EventSequenceStore


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _json_lines(out: str):
    return [json.loads(line) for line in out.splitlines() if line.strip()]


def test_json_log_carries_correlation_id(capsys, restore_root_logger):
    setup_logging(level="INFO", log_format="json")

    get_logger("deploy_events.test", correlation_id="op-42").info("hello")

    records = _json_lines(capsys.readouterr().out)
    assert records[-1]["message"] == "hello"
    assert records[-1]["correlation_id"] == "op-42"
    assert records[-1]["level"] == "INFO"
    assert records[-1]["logger"] == "deploy_events.test"


def test_json_log_defaults_correlation_id(capsys, restore_root_logger):
    setup_logging(level="INFO", log_format="json")

    logging.getLogger("deploy_events.other").warning("no id")

    records = _json_lines(capsys.readouterr().out)
    assert records[-1]["correlation_id"] == "N/A"


def test_store_passes_caller_correlation_id(capsys, restore_root_logger):
    setup_logging(level="DEBUG", log_format="json")
    store = EventSequenceStore()

    store.put("d1", 0, DeploymentEvent(index=0, description="x"), correlation_id="req-7")

    records = [r for r in _json_lines(capsys.readouterr().out) if r["logger"] == "deploy_events.log.store"]
    assert any(r["correlation_id"] == "req-7" for r in records)


def test_text_format(capsys, restore_root_logger):
    setup_logging(level="INFO", log_format="text")

    get_logger("deploy_events.test", correlation_id="op-1").info("plain")

    out = capsys.readouterr().out
    assert "plain" in out
    assert "[correlation_id=op-1]" in out


def test_stream_override_keeps_stdout_clean(capsys, restore_root_logger):
    setup_logging(level="INFO", log_format="json", stream=sys.stderr)

    get_logger("deploy_events.test", correlation_id="op-9").info("to stderr")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert _json_lines(captured.err)[-1]["message"] == "to stderr"
