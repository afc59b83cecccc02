"""Pytest fixtures for the hanging resources sweep tests.

No cluster is needed: the sweeper runs against in-memory doubles of the
cluster access layer and of the oc runner.
"""

from __future__ import annotations

import json
import subprocess
from typing import Any, Callable, Optional

import pytest

from hanging_resources.catalog import ResourceType, Scope
from hanging_resources.cluster import ClusterClient
from hanging_resources.errors import ClusterError, EnvironmentCheckError
from hanging_resources.oc_runner import OcRunner

DELETION_TIMESTAMP = "2025-01-01T00:00:00Z"


class FakeClusterClient(ClusterClient):
    """In-memory cluster keyed by resource type name.

    Types missing from ``objects`` fail to list, like a CRD that is not
    installed. With ``gc=True`` a successful patch removes the object, the
    way the API server does once the last finalizer is gone.
    """

    def __init__(
        self,
        objects: Optional[dict[str, list[dict[str, Any]]]] = None,
        fail_patch: Optional[set[tuple[str, Optional[str], str]]] = None,
        gc: bool = False,
        user: Optional[str] = "kube:admin",
    ) -> None:
        self.objects = objects or {}
        self.fail_patch = fail_patch or set()
        self.gc = gc
        self.user = user
        self.listed: list[str] = []
        self.patches: list[tuple[str, Optional[str], str]] = []

    def list_all(self, resource_type: ResourceType) -> list[dict[str, Any]]:
        self.listed.append(resource_type.name)
        if resource_type.name not in self.objects:
            raise ClusterError(
                f"Cannot list {resource_type.name}",
                stderr=f'error: the server doesn\'t have a resource type "{resource_type.name}"',
            )
        return list(self.objects[resource_type.name])

    def patch_finalizers(self, resource_type, namespace, name) -> None:
        key = (resource_type.name, namespace, name)
        self.patches.append(key)
        if key in self.fail_patch:
            raise ClusterError(f"oc patch {resource_type.name} {name} failed", stderr="forbidden")
        if self.gc:
            self.objects[resource_type.name] = [
                obj for obj in self.objects[resource_type.name]
                if not self._matches(obj, namespace, name)
            ]

    @staticmethod
    def _matches(obj: dict[str, Any], namespace: Optional[str], name: str) -> bool:
        metadata = obj["metadata"]
        if metadata["name"] != name:
            return False
        return namespace is None or metadata.get("namespace") == namespace

    def whoami(self) -> str:
        if self.user is None:
            raise EnvironmentCheckError("Not logged in. Run 'oc login' first.")
        return self.user

    def server(self) -> str:
        return "https://api.test.example.com:6443"


class FakeOcRunner(OcRunner):
    """Record oc invocations and answer them through a handler.

    The handler receives the argument tuple and returns ``(returncode,
    stdout, stderr)`` or raises.
    """

    def __init__(self, handler: Callable[[tuple[str, ...]], tuple[int, str, str]]) -> None:
        self.handler = handler
        self.calls: list[tuple[str, ...]] = []

    def oc(self, *args: str, timeout=None) -> subprocess.CompletedProcess:
        self.calls.append(args)
        returncode, stdout, stderr = self.handler(args)
        return subprocess.CompletedProcess(
            args=["oc"] + list(args),
            returncode=returncode,
            stdout=stdout,
            stderr=stderr,
        )


@pytest.fixture
def make_object() -> Callable[..., dict[str, Any]]:
    """Build a listed object the way ``oc get -o json`` returns it."""

    def _make(
        name: str,
        namespace: Optional[str] = None,
        terminating: bool = True,
        finalizers: Optional[list[str]] = None,
    ) -> dict[str, Any]:
        metadata: dict[str, Any] = {"name": name}
        if namespace is not None:
            metadata["namespace"] = namespace
        if terminating:
            metadata["deletionTimestamp"] = DELETION_TIMESTAMP
            metadata["finalizers"] = finalizers if finalizers is not None else ["example.com/cleanup"]
        return {"metadata": metadata}

    return _make


@pytest.fixture
def list_json() -> Callable[..., str]:
    """Serialize objects as an ``oc get -o json`` List document."""

    def _dump(*items: dict[str, Any]) -> str:
        return json.dumps({"apiVersion": "v1", "kind": "List", "items": list(items)})

    return _dump


@pytest.fixture
def type_a() -> ResourceType:
    return ResourceType(name="widgets.example.com", group="example.com", plural="widgets")


@pytest.fixture
def type_b() -> ResourceType:
    return ResourceType(name="gadgets.example.com", group="example.com", plural="gadgets")


@pytest.fixture
def namespace_type() -> ResourceType:
    return ResourceType(name="namespace", group="", plural="namespaces", scope=Scope.CLUSTER)


@pytest.fixture
def fake_cluster_factory() -> Callable[..., FakeClusterClient]:
    return FakeClusterClient


@pytest.fixture
def fake_oc_factory() -> Callable[..., FakeOcRunner]:
    return FakeOcRunner
