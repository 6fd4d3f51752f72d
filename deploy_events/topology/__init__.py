"""
Topology views used to classify operations and locate workers.

This module provides:
- TopologyProvider: Abstract live view over units and zones
- StaticTopology: In-memory provider
- Unit, Zone, Worker: Topology value objects

KubernetesTopology lives in .k8s and is imported explicitly by callers that
talk to a cluster.
"""

from .base import TopologyProvider, StaticTopology, Unit, Zone, Worker

__all__ = [
    "TopologyProvider",
    "StaticTopology",
    "Unit",
    "Zone",
    "Worker",
]
