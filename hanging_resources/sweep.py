"""
Find resources stuck in Terminating and remove their finalizers so the API
server can finish deleting them.

The sweep only clears ``metadata.finalizers`` on objects that already carry a
deletion timestamp; it never deletes anything itself. Running it again is
safe: objects that were unblocked are gone from the next listing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable, Optional

from hanging_resources.catalog import RESOURCE_TYPES, ResourceType
from hanging_resources.errors import ClusterError

if TYPE_CHECKING:
    from hanging_resources.cluster import ClusterClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TerminatingResource:
    """An object with ``metadata.deletionTimestamp`` set."""

    resource_type: ResourceType
    namespace: Optional[str]
    name: str
    deletion_timestamp: str
    finalizers: tuple[str, ...] = ()

    @property
    def qualified_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name

    def describe(self) -> str:
        return f"{self.resource_type.name} {self.qualified_name}"


@dataclass
class SweepSummary:
    """Per-type and total counts of terminating objects found in one run."""

    dry_run: bool = False
    counts: dict[str, int] = field(default_factory=dict)
    failed: list[TerminatingResource] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(self.counts.values())


def to_terminating(
    resource_type: ResourceType, obj: dict[str, Any]
) -> Optional[TerminatingResource]:
    """Project a listed object to a TerminatingResource, or None if it is not terminating.

    Cluster-scoped types are addressed by name alone; any namespace on the
    object is ignored for them.
    """
    metadata = obj.get("metadata") or {}
    deletion_timestamp = metadata.get("deletionTimestamp")
    if deletion_timestamp is None:
        return None
    namespace = metadata.get("namespace") if resource_type.namespaced else None
    return TerminatingResource(
        resource_type=resource_type,
        namespace=namespace or None,
        name=metadata["name"],
        deletion_timestamp=str(deletion_timestamp),
        finalizers=tuple(metadata.get("finalizers") or ()),
    )


def find_terminating(
    cluster: ClusterClient, resource_type: ResourceType
) -> list[TerminatingResource]:
    """List the type and keep objects with a deletion timestamp, in listing order.

    A type that cannot be listed (e.g. its CRD is not installed) yields no
    objects.
    """
    try:
        items = cluster.list_all(resource_type)
    except ClusterError as exc:
        logger.debug("Skipping %s: %s %s", resource_type.name, exc, exc.stderr)
        return []
    found = []
    for obj in items:
        resource = to_terminating(resource_type, obj)
        if resource is not None:
            found.append(resource)
    return found


def remove_finalizers(
    cluster: ClusterClient, resource: TerminatingResource, dry_run: bool = False
) -> bool:
    """Clear the finalizers of one terminating object.

    Returns False when the patch failed; the failure is logged, not raised.
    """
    if dry_run:
        logger.info("[DRY-RUN] Would patch %s", resource.describe())
        return True
    try:
        cluster.patch_finalizers(resource.resource_type, resource.namespace, resource.name)
    except ClusterError as exc:
        detail = f": {exc.stderr}" if exc.stderr else ""
        logger.warning("Failed to patch %s%s", resource.describe(), detail)
        return False
    return True


def sweep_resource_type(
    cluster: ClusterClient,
    resource_type: ResourceType,
    dry_run: bool = False,
) -> tuple[int, list[TerminatingResource]]:
    """Process every terminating object of one type.

    Returns the number found and the objects whose patch failed.
    """
    count = 0
    failed: list[TerminatingResource] = []
    for resource in find_terminating(cluster, resource_type):
        finalizers = ", ".join(resource.finalizers) or "none"
        logger.info(
            "Terminating: %s (finalizers: %s)", resource.describe(), finalizers
        )
        if not remove_finalizers(cluster, resource, dry_run=dry_run):
            failed.append(resource)
        count += 1
    if count:
        verb = "Would patch" if dry_run else "Patched"
        logger.info("  -> %s %d %s resource(s)", verb, count, resource_type.name)
    return count, failed


def sweep_hanging_resources(
    cluster: ClusterClient,
    resource_types: Iterable[ResourceType] = RESOURCE_TYPES,
    dry_run: bool = False,
) -> SweepSummary:
    """Sweep every catalog type in order and summarise what was found."""
    summary = SweepSummary(dry_run=dry_run)
    for resource_type in resource_types:
        count, failed = sweep_resource_type(cluster, resource_type, dry_run=dry_run)
        summary.counts[resource_type.name] = count
        summary.failed.extend(failed)

    if summary.total == 0:
        logger.info("No resources stuck in Terminating were found.")
    elif dry_run:
        logger.info(
            "Done. %d resource(s) would be patched to remove finalizers.", summary.total
        )
    else:
        logger.info(
            "Done. Patched %d resource(s) to remove finalizers.", summary.total
        )
        logger.info("They should disappear shortly. Re-run this tool if any remain.")
    if summary.failed:
        logger.warning(
            "%d patch(es) failed: %s",
            len(summary.failed),
            ", ".join(r.describe() for r in summary.failed),
        )
    return summary
