"""
Tests for the deploy-events CLI (offline commands only).
"""

import json
import logging
import sys

import pytest
from typer.testing import CliRunner

from cli.commands import collect
from cli.main import app
from collector.config import CollectorConfig
from collector.logging_config import setup_logging
from collector.service import DeploymentEventCollector
from collector.sources import StaticLogSource
from deploy_events.classify import DeploymentClassifier
from deploy_events.topology.base import StaticTopology, Unit, Worker, Zone

runner = CliRunner()

LINE = "2024-01-01 10:00:00 - org.foo.USMEventLogger.Starting service"


def test_translate_single_line():
    result = runner.invoke(
        app, ["events", "translate", "--host", "h1", "--address", "10.0.0.1", "--line", LINE]
    )

    assert result.exit_code == 0
    assert "[h1/10.0.0.1] - Starting service" in result.output


def test_translate_stdin_skips_other_loggers():
    stdin = LINE + "\n2024-01-01 10:00:01 - org.foo.Other.noise\n"
    result = runner.invoke(
        app, ["events", "translate", "--host", "h1", "--address", "10.0.0.1"], input=stdin
    )

    assert result.exit_code == 0
    assert result.output.strip().splitlines() == ["[h1/10.0.0.1] - Starting service"]


def test_translate_malformed_exits_2():
    result = runner.invoke(
        app, ["events", "translate", "--host", "h", "--address", "a", "--line", "broken USMEventLogger"]
    )

    assert result.exit_code == 2


def test_page_complete_json(tmp_path):
    log = tmp_path / "worker.log"
    log.write_text(LINE + "\n" + LINE.replace("Starting service", "Service started") + "\n")

    result = runner.invoke(
        app, ["events", "page", str(log), "--to", "1", "--host", "h1", "--address", "10.0.0.1", "--json"]
    )

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["complete"]
    assert [e["index"] for e in data["events"]] == [0, 1]
    assert data["events"][1]["description"] == "[h1/10.0.0.1] - Service started"


def test_page_incomplete_exits_3(tmp_path):
    log = tmp_path / "worker.log"
    log.write_text(LINE + "\n")

    result = runner.invoke(app, ["events", "page", str(log), "--from", "0", "--to", "4", "--json"])

    assert result.exit_code == 3
    data = json.loads(result.output)
    assert data == {"complete": False, "present": 1, "missing": 4}


def test_page_missing_file_exits_2(tmp_path):
    result = runner.invoke(app, ["events", "page", str(tmp_path / "nope.log"), "--to", "0"])

    assert result.exit_code == 2


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_collect_json_keeps_logs_off_stdout(monkeypatch, restore_root_logger):
    """collect --json prints one parseable document; logging goes to stderr."""
    seen = {}
    worker = Worker(name="web-0", host_name="web-0", host_address="10.0.0.1")

    def fake_build_collector(**kwargs):
        seen.update(kwargs)
        seen["stderr"] = sys.stderr
        setup_logging(level=kwargs["log_level"], stream=kwargs["log_stream"])
        topology = StaticTopology(
            unit_list=[Unit(name="web", deployment_id="op-42")],
            zones=[Zone(name="web", workers=frozenset({worker}))],
        )
        config = CollectorConfig(
            namespace="test",
            poll_interval_seconds=0.01,
            retention_seconds=3600.0,
            management_application_name="management",
            halt_on_malformed=False,
            metrics_enabled=False,
            metrics_port=0,
        )
        return DeploymentEventCollector(
            DeploymentClassifier(topology), StaticLogSource({"web-0": [LINE]}), config
        )

    monkeypatch.setattr(collect, "build_collector", fake_build_collector)

    result = runner.invoke(
        app, ["collect", "op-42", "--to", "0", "--timeout", "5", "--interval", "0.05", "--json"]
    )

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["complete"]
    assert data["events"][0]["description"] == "[web-0/10.0.0.1] - Starting service"
    assert seen["log_stream"] is seen["stderr"]
    assert seen["log_level"] == "WARNING"
