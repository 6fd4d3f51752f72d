"""
Kubernetes-backed topology provider.

Maps the topology model onto namespaced objects:
- Unit: apps/v1 Deployment, ids read from annotations
- Zone: pods labelled deploy-events.io/zone=<unit name>
- Worker: one pod (host identity = pod hostname/name + pod IP)
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from kubernetes import client
from kubernetes.client.rest import ApiException

from .base import TopologyProvider, Unit, Worker, Zone

logger = logging.getLogger(__name__)

ANNOTATION_PREFIX = "deploy-events.io"
DEPLOYMENT_ID_KEY = f"{ANNOTATION_PREFIX}/deployment-id"
UNDEPLOYMENT_ID_KEY = f"{ANNOTATION_PREFIX}/undeployment-id"
APPLICATION_KEY = f"{ANNOTATION_PREFIX}/application"
ZONE_LABEL = f"{ANNOTATION_PREFIX}/zone"


def unit_from_deployment(dep) -> Unit:
    meta = dep.metadata
    annotations = meta.annotations or {}
    labels = meta.labels or {}
    return Unit(
        name=meta.name,
        deployment_id=annotations.get(DEPLOYMENT_ID_KEY),
        undeployment_id=annotations.get(UNDEPLOYMENT_ID_KEY),
        application_name=labels.get(APPLICATION_KEY),
    )


def worker_from_pod(pod) -> Worker:
    spec = pod.spec
    status = pod.status
    host_name = (spec.hostname if spec is not None else None) or pod.metadata.name
    host_address = (status.pod_ip if status is not None else None) or "unknown"
    return Worker(name=pod.metadata.name, host_name=host_name, host_address=host_address)


class KubernetesTopology(TopologyProvider):
    def __init__(
        self,
        namespace: str,
        apps_api: Optional[client.AppsV1Api] = None,
        core_api: Optional[client.CoreV1Api] = None,
    ) -> None:
        self.namespace = namespace
        self._apps = apps_api or client.AppsV1Api()
        self._core = core_api or client.CoreV1Api()

    def units(self) -> Iterable[Unit]:
        try:
            deployments = self._apps.list_namespaced_deployment(self.namespace)
        except ApiException as ex:
            if ex.status == 404:
                return []
            raise
        return [unit_from_deployment(dep) for dep in deployments.items]

    def zone(self, name: str) -> Optional[Zone]:
        try:
            pods = self._core.list_namespaced_pod(
                self.namespace, label_selector=f"{ZONE_LABEL}={name}"
            )
        except ApiException as ex:
            if ex.status == 404:
                return None
            raise

        workers: List[Worker] = [worker_from_pod(p) for p in pods.items]
        if not workers:
            logger.debug(f"Zone {name} has no pods yet in namespace {self.namespace}")
            return None
        return Zone(name=name, workers=frozenset(workers))
