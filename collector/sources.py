"""
Log sources: where watchers get raw worker log lines from.

Every read returns the worker's full log snapshot; delivery is at-least-once,
so a line may be seen by many reads.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from kubernetes import client
from kubernetes.client.rest import ApiException

from deploy_events.topology.base import Worker


class LogSource(ABC):
    @abstractmethod
    def read_lines(self, worker: Worker) -> List[str]:
        """
        Return the worker's log lines in emission order.

        A worker whose log is not readable yet yields [].
        """
        ...


class StaticLogSource(LogSource):
    """In-memory log source keyed by worker name."""

    def __init__(self, lines: Optional[Dict[str, List[str]]] = None) -> None:
        self.lines: Dict[str, List[str]] = {k: list(v) for k, v in (lines or {}).items()}

    def append(self, worker_name: str, line: str) -> None:
        self.lines.setdefault(worker_name, []).append(line)

    def read_lines(self, worker: Worker) -> List[str]:
        return list(self.lines.get(worker.name, []))


class KubernetesPodLogSource(LogSource):
    """Reads worker logs with CoreV1Api.read_namespaced_pod_log."""

    def __init__(
        self,
        namespace: str,
        core_api: Optional[client.CoreV1Api] = None,
        container: Optional[str] = None,
    ) -> None:
        self.namespace = namespace
        self.container = container
        self._core = core_api or client.CoreV1Api()

    def read_lines(self, worker: Worker) -> List[str]:
        kwargs = {}
        if self.container:
            kwargs["container"] = self.container
        try:
            text = self._core.read_namespaced_pod_log(worker.name, self.namespace, **kwargs)
        except ApiException as ex:
            # 400: container still starting, 404: pod gone
            if ex.status in (400, 404):
                return []
            raise
        return text.splitlines() if text else []
