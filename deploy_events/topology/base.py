"""
Topology provider abstract interface.

A topology view answers two questions: which units are live right now, and
which workers belong to a named zone.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional


@dataclass(frozen=True)
class Worker:
    """One running member of a deployment whose logs are tailed."""
    name: str
    host_name: str
    host_address: str


@dataclass(frozen=True)
class Zone:
    """Named grouping of workers; a unit's workers live in the zone named after it."""
    name: str
    workers: FrozenSet[Worker] = frozenset()


@dataclass(frozen=True)
class Unit:
    """
    Deployed unit with its correlation metadata.

    Fields:
        name: Unit name (also the name of its zone)
        deployment_id: Id of the deployment operation that installed it
        undeployment_id: Id of the undeployment operation tearing it down
        application_name: Owning application (management units are skipped)
    """
    name: str
    deployment_id: Optional[str] = None
    undeployment_id: Optional[str] = None
    application_name: Optional[str] = None


class TopologyProvider(ABC):
    """
    Live view over units and zones.

    Implementations must return a fresh snapshot on every call; callers never
    cache results across operations.
    """

    @abstractmethod
    def units(self) -> Iterable[Unit]:
        """Enumerate currently known units."""
        ...

    @abstractmethod
    def zone(self, name: str) -> Optional[Zone]:
        """
        Resolve a zone by name.

        Returns:
            Zone, or None if the topology has not converged on it yet
        """
        ...


@dataclass
class StaticTopology(TopologyProvider):
    """In-memory topology, used by tests and file-backed CLI commands."""
    unit_list: List[Unit] = field(default_factory=list)
    zones: List[Zone] = field(default_factory=list)

    def units(self) -> Iterable[Unit]:
        return list(self.unit_list)

    def zone(self, name: str) -> Optional[Zone]:
        for z in self.zones:
            if z.name == name:
                return z
        return None
