"""
Collector configuration, read from the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from deploy_events.classify import MANAGEMENT_APPLICATION_NAME


def _read_namespace() -> str:
    env_ns = os.getenv("DEPLOY_EVENTS_NAMESPACE") or os.getenv("POD_NAMESPACE")
    if env_ns:
        return env_ns
    try:
        with open("/var/run/secrets/kubernetes.io/serviceaccount/namespace", "r") as f:
            return f.read().strip()
    except OSError:
        return "default"


@dataclass
class CollectorConfig:
    namespace: str
    poll_interval_seconds: float
    retention_seconds: float
    management_application_name: str
    halt_on_malformed: bool
    metrics_enabled: bool
    metrics_port: int

    @staticmethod
    def from_env() -> "CollectorConfig":
        return CollectorConfig(
            namespace=_read_namespace(),
            poll_interval_seconds=float(os.getenv("DEPLOY_EVENTS_POLL_INTERVAL_SECONDS", "2")),
            retention_seconds=float(os.getenv("DEPLOY_EVENTS_RETENTION_SECONDS", "3600")),
            management_application_name=os.getenv(
                "DEPLOY_EVENTS_MANAGEMENT_APP", MANAGEMENT_APPLICATION_NAME
            ),
            halt_on_malformed=os.getenv("DEPLOY_EVENTS_HALT_ON_MALFORMED", "0") == "1",
            metrics_enabled=os.getenv("METRICS_ENABLED", "false").lower() == "true",
            metrics_port=int(os.getenv("METRICS_PORT", "8080")),
        )
