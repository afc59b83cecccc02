"""
Remove finalizers from OpenShift AI resources stuck in Terminating.

After an uninstall, custom resources, workloads and namespaces can stay in
Terminating because the controller owning their finalizers is already gone.
This package scans a fixed catalog of resource types and clears the
finalizers of every object that carries a deletion timestamp:
- via the oc CLI (default), or
- via the Kubernetes API with the kubernetes Python client.
"""

from hanging_resources.sweep import SweepSummary, sweep_hanging_resources

__all__ = ["sweep_hanging_resources", "SweepSummary"]
