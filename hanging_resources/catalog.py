"""
Resource types that can get stuck in Terminating after an OpenShift AI
uninstall, in the order they are swept.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Scope(enum.Enum):
    """How an instance of a resource type is addressed."""

    NAMESPACED = "namespaced"
    CLUSTER = "cluster"


@dataclass(frozen=True)
class ResourceType:
    """One entry of the sweep catalog.

    ``name`` is the identifier accepted by ``oc get <name> -A``; ``group``
    and ``plural`` address the same type through the Kubernetes API
    (``group`` is empty for the core group).
    """

    name: str
    group: str
    plural: str
    scope: Scope = Scope.NAMESPACED

    @property
    def namespaced(self) -> bool:
        return self.scope is Scope.NAMESPACED


def custom_resource(plural: str, group: str) -> ResourceType:
    """Catalog entry for a namespaced custom resource ``<plural>.<group>``."""
    return ResourceType(name=f"{plural}.{group}", group=group, plural=plural)


RESOURCE_TYPES: tuple[ResourceType, ...] = (
    # KServe
    custom_resource("inferenceservices", "serving.kserve.io"),
    custom_resource("servingruntimes", "serving.kserve.io"),
    # Workbenches
    custom_resource("notebooks", "kubeflow.org"),
    # Dashboard / infrastructure profiles
    custom_resource("hardwareprofiles", "infrastructure.opendatahub.io"),
    custom_resource("acceleratorprofiles", "dashboard.opendatahub.io"),
    # Operator top-level CRs
    ResourceType(
        name="datascienceclusters.datasciencecluster.opendatahub.io",
        group="datasciencecluster.opendatahub.io",
        plural="datascienceclusters",
        scope=Scope.CLUSTER,
    ),
    ResourceType(
        name="dscinitializations.dscinitialization.opendatahub.io",
        group="dscinitialization.opendatahub.io",
        plural="dscinitializations",
        scope=Scope.CLUSTER,
    ),
    # Built-in workloads
    ResourceType(name="deployment", group="apps", plural="deployments"),
    ResourceType(name="replicaset", group="apps", plural="replicasets"),
    ResourceType(name="statefulset", group="apps", plural="statefulsets"),
    ResourceType(name="pod", group="", plural="pods"),
    ResourceType(name="namespace", group="", plural="namespaces", scope=Scope.CLUSTER),
)
