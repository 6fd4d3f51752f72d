"""
Collector bootstrap against a Kubernetes cluster.

Usage:
    from collector.main import build_collector

    collector = build_collector()
    collector.track("op-42")
"""

from typing import Optional, TextIO

import kubernetes

from deploy_events.classify import DeploymentClassifier
from deploy_events.topology.k8s import KubernetesTopology

from .config import CollectorConfig
from .logging_config import get_logger, setup_logging
from .metrics import init_metrics, start_metrics_server
from .service import DeploymentEventCollector
from .sources import KubernetesPodLogSource


def load_kube_config() -> None:
    # Try in-cluster config first, fallback to kubeconfig for local development
    try:
        kubernetes.config.load_incluster_config()
    except kubernetes.config.ConfigException:
        kubernetes.config.load_kube_config()


def build_collector(
    config: Optional[CollectorConfig] = None,
    configure_logging: bool = True,
    log_level: Optional[str] = None,
    log_stream: Optional[TextIO] = None,
) -> DeploymentEventCollector:
    config = config or CollectorConfig.from_env()
    if configure_logging:
        setup_logging(level=log_level, stream=log_stream)

    init_metrics()
    start_metrics_server(enabled=config.metrics_enabled, port=config.metrics_port)

    load_kube_config()
    topology = KubernetesTopology(config.namespace)
    classifier = DeploymentClassifier(
        topology, management_application_name=config.management_application_name
    )
    source = KubernetesPodLogSource(config.namespace)

    logger = get_logger(__name__)
    logger.info("Collector startup complete", extra={
        "namespace": config.namespace,
        "metrics_enabled": config.metrics_enabled,
        "poll_interval_seconds": config.poll_interval_seconds,
    })
    return DeploymentEventCollector(classifier, source, config)
