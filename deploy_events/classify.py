"""
Operation classification and worker lookup.

An operation id is either the deployment id of some live unit, or it is
treated as an undeployment. The classification is a closed-world inference:
an id unknown to the topology also comes back as UNDEPLOYMENT.
"""

import logging
from enum import Enum
from typing import FrozenSet, Optional

from .topology.base import TopologyProvider, Unit, Worker

logger = logging.getLogger(__name__)

MANAGEMENT_APPLICATION_NAME = "management"


class OperationKind(str, Enum):
    DEPLOYMENT = "deployment"
    UNDEPLOYMENT = "undeployment"


class DeploymentClassifier:
    """
    Resolves operation ids against a live topology view.

    Lookups never raise for missing units or zones; an empty result means
    "not discoverable yet" and callers retry later.
    """

    def __init__(
        self,
        topology: TopologyProvider,
        management_application_name: str = MANAGEMENT_APPLICATION_NAME,
    ) -> None:
        self.topology = topology
        self.management_application_name = management_application_name

    def is_management_unit(self, unit: Unit) -> bool:
        return unit.application_name == self.management_application_name

    @staticmethod
    def is_undeployment_in_progress(unit: Unit) -> bool:
        return unit.undeployment_id is not None

    def is_deployment(self, operation_id: str) -> bool:
        for unit in self.topology.units():
            if self.is_management_unit(unit):
                continue
            if unit.deployment_id == operation_id:
                return True
        return False

    def is_undeployment(self, operation_id: str) -> bool:
        return not self.is_deployment(operation_id)

    def classify(self, operation_id: str) -> OperationKind:
        if self.is_deployment(operation_id):
            return OperationKind.DEPLOYMENT
        return OperationKind.UNDEPLOYMENT

    def workers_for_unit(self, unit: Unit) -> FrozenSet[Worker]:
        """Workers in the zone named after the unit (empty if the zone is not up yet)."""
        zone = self.topology.zone(unit.name)
        if zone is None:
            return frozenset()
        return frozenset(zone.workers)

    def units_for(self, operation_id: str) -> FrozenSet[Worker]:
        """
        Locate the workers taking part in an operation.

        Deployments match on deployment id, undeployments on undeployment id.
        Management units are not skipped here.

        Returns:
            Workers of the matching unit's zone, or an empty frozenset
        """
        kind = self.classify(operation_id)
        unit = self._find_unit(operation_id, kind)
        if unit is None:
            logger.debug(f"No unit found for {kind.value} {operation_id}")
            return frozenset()
        return self.workers_for_unit(unit)

    def _find_unit(self, operation_id: str, kind: OperationKind) -> Optional[Unit]:
        for unit in self.topology.units():
            if kind is OperationKind.DEPLOYMENT:
                unit_op = unit.deployment_id
            else:
                unit_op = unit.undeployment_id
            if unit_op == operation_id:
                return unit
        return None
