"""
Cluster access layer for the sweep.

ClusterClient is the small surface the sweeper needs: list every object of a
resource type, clear an object's finalizers, and identify the session.
OcClusterClient drives the oc CLI through an OcRunner; KubeApiClusterClient
talks to the API server with the kubernetes Python client.
"""

from __future__ import annotations

import json
import logging
import subprocess
from typing import TYPE_CHECKING, Any, Optional

import urllib3
from kubernetes import client, config
from kubernetes.client.rest import ApiException

from hanging_resources.constants import (
    DEFAULT_OC_TIMEOUT,
    FINALIZERS_PATCH,
    FINALIZERS_PATCH_JSON,
    MERGE_PATCH_CONTENT_TYPE,
    WHOAMI_TIMEOUT,
)
from hanging_resources.errors import ClusterError, EnvironmentCheckError

if TYPE_CHECKING:
    from hanging_resources.catalog import ResourceType
    from hanging_resources.oc_runner import OcRunner

logger = logging.getLogger(__name__)


class ClusterClient:
    """
    List and patch cluster objects for the sweep.
    Implementations: OcClusterClient and KubeApiClusterClient.
    """

    def list_all(self, resource_type: ResourceType) -> list[dict[str, Any]]:
        """Return every object of the type across all namespaces.

        Raises ClusterError when the type cannot be listed (not installed,
        forbidden, API unreachable).
        """
        raise NotImplementedError

    def patch_finalizers(
        self,
        resource_type: ResourceType,
        namespace: Optional[str],
        name: str,
    ) -> None:
        """Merge-patch ``metadata.finalizers`` to null. Raises ClusterError."""
        raise NotImplementedError

    def whoami(self) -> str:
        """Return the logged-in user. Raises EnvironmentCheckError if not logged in."""
        raise NotImplementedError

    def server(self) -> str:
        """Return the API server URL (informational only)."""
        raise NotImplementedError


class OcClusterClient(ClusterClient):
    """Cluster access through ``oc`` with JSON output."""

    def __init__(self, runner: OcRunner, timeout: int = DEFAULT_OC_TIMEOUT) -> None:
        self.runner = runner
        self.timeout = timeout

    def _oc(self, *args: str, timeout: Optional[int] = None) -> subprocess.CompletedProcess:
        try:
            return self.runner.oc(*args, timeout=timeout or self.timeout)
        except subprocess.TimeoutExpired as exc:
            raise ClusterError(f"oc {' '.join(args)} timed out after {exc.timeout}s") from exc

    def list_all(self, resource_type: ResourceType) -> list[dict[str, Any]]:
        args = ["get", resource_type.name, "-o", "json"]
        if resource_type.namespaced:
            args.append("-A")
        r = self._oc(*args)
        if r.returncode != 0:
            raise ClusterError(
                f"Cannot list {resource_type.name}", stderr=(r.stderr or "").strip()
            )
        try:
            data = json.loads(r.stdout or "{}")
        except json.JSONDecodeError as exc:
            raise ClusterError(f"Invalid JSON listing {resource_type.name}: {exc}") from exc
        return data.get("items") or []

    def patch_finalizers(
        self,
        resource_type: ResourceType,
        namespace: Optional[str],
        name: str,
    ) -> None:
        args = ["patch", resource_type.name, name]
        if namespace:
            args += ["-n", namespace]
        args += ["--type=merge", f"--patch={FINALIZERS_PATCH_JSON}"]
        r = self._oc(*args)
        if r.returncode != 0:
            raise ClusterError(
                f"oc patch {resource_type.name} {name} failed",
                stderr=(r.stderr or r.stdout or "").strip(),
            )

    def whoami(self) -> str:
        try:
            r = self.runner.oc("whoami", timeout=WHOAMI_TIMEOUT)
        except FileNotFoundError as exc:
            raise EnvironmentCheckError("oc not found. Install OpenShift CLI.") from exc
        except subprocess.TimeoutExpired as exc:
            raise EnvironmentCheckError(
                f"oc whoami timed out after {exc.timeout}s; is the cluster reachable?"
            ) from exc
        if r.returncode != 0:
            raise EnvironmentCheckError("Not logged in. Run 'oc login' first.")
        return (r.stdout or "").strip()

    def server(self) -> str:
        try:
            r = self._oc("whoami", "--show-server", timeout=WHOAMI_TIMEOUT)
        except ClusterError:
            return "unknown"
        if r.returncode != 0:
            return "unknown"
        return (r.stdout or "").strip() or "unknown"


# Core (legacy group) types the sweep catalog uses: plural -> (list, patch) method names
CORE_API_METHODS = {
    "pods": ("list_pod_for_all_namespaces", "patch_namespaced_pod"),
    "namespaces": ("list_namespace", "patch_namespace"),
}


class KubeApiClusterClient(ClusterClient):
    """Cluster access through the Kubernetes REST API.

    Core group types use CoreV1Api; every other group goes through
    CustomObjectsApi at the group's preferred version, which also serves
    built-in groups such as ``apps``.
    """

    def __init__(self, api_client: client.ApiClient) -> None:
        self.api_client = api_client
        self.core_api = client.CoreV1Api(api_client)
        self.custom_api = client.CustomObjectsApi(api_client)
        self._preferred_versions: dict[str, str] | None = None

    @classmethod
    def from_kubeconfig(cls, kubeconfig: Optional[str] = None) -> KubeApiClusterClient:
        """Build a client from an explicit kubeconfig, in-cluster config, or the default kubeconfig.

        An explicit kubeconfig is honoured even when running inside a cluster.
        """
        if kubeconfig:
            try:
                return cls(config.new_client_from_config(config_file=str(kubeconfig)))
            except config.ConfigException as exc:
                raise EnvironmentCheckError(
                    f"Kubeconfig {kubeconfig} could not be loaded: {exc}"
                ) from exc
        try:
            config.load_incluster_config()
            return cls(client.ApiClient())
        except config.ConfigException:
            pass
        try:
            return cls(config.new_client_from_config())
        except config.ConfigException as exc:
            raise EnvironmentCheckError(
                f"Cannot load Kubernetes config. Set KUBECONFIG or run inside a cluster. Error: {exc}"
            ) from exc

    def preferred_version(self, group: str) -> str:
        """Return the preferred version served for an API group."""
        if self._preferred_versions is None:
            groups = client.ApisApi(self.api_client).get_api_versions()
            self._preferred_versions = {
                g.name: g.preferred_version.version for g in groups.groups or []
            }
            logger.debug("Discovered %d API groups", len(self._preferred_versions))
        try:
            return self._preferred_versions[group]
        except KeyError:
            raise ClusterError(f"API group {group} is not served by this cluster") from None

    def _core_method(self, resource_type: ResourceType, index: int):
        try:
            name = CORE_API_METHODS[resource_type.plural][index]
        except KeyError:
            raise ClusterError(f"Unsupported core resource type: {resource_type.name}") from None
        return getattr(self.core_api, name)

    def list_all(self, resource_type: ResourceType) -> list[dict[str, Any]]:
        try:
            if not resource_type.group:
                result = self._core_method(resource_type, 0)()
                return [
                    self.api_client.sanitize_for_serialization(item)
                    for item in result.items or []
                ]
            version = self.preferred_version(resource_type.group)
            result = self.custom_api.list_cluster_custom_object(
                resource_type.group, version, resource_type.plural,
            )
            return result.get("items") or []
        except ApiException as exc:
            raise ClusterError(
                f"Cannot list {resource_type.name}: {exc.status} {exc.reason}",
                stderr=exc.body or "",
            ) from exc
        except urllib3.exceptions.HTTPError as exc:
            raise ClusterError(f"Cannot list {resource_type.name}: {exc}") from exc

    def patch_finalizers(
        self,
        resource_type: ResourceType,
        namespace: Optional[str],
        name: str,
    ) -> None:
        try:
            if not resource_type.group:
                patch = self._core_method(resource_type, 1)
                if namespace:
                    patch(name, namespace, FINALIZERS_PATCH, _content_type=MERGE_PATCH_CONTENT_TYPE)
                else:
                    patch(name, FINALIZERS_PATCH, _content_type=MERGE_PATCH_CONTENT_TYPE)
                return
            version = self.preferred_version(resource_type.group)
            if namespace:
                self.custom_api.patch_namespaced_custom_object(
                    resource_type.group, version, namespace,
                    resource_type.plural, name, FINALIZERS_PATCH,
                    _content_type=MERGE_PATCH_CONTENT_TYPE,
                )
            else:
                self.custom_api.patch_cluster_custom_object(
                    resource_type.group, version,
                    resource_type.plural, name, FINALIZERS_PATCH,
                    _content_type=MERGE_PATCH_CONTENT_TYPE,
                )
        except ApiException as exc:
            raise ClusterError(
                f"Patch of {resource_type.name} {name} failed: {exc.status} {exc.reason}",
                stderr=exc.body or "",
            ) from exc
        except urllib3.exceptions.HTTPError as exc:
            raise ClusterError(f"Patch of {resource_type.name} {name} failed: {exc}") from exc

    def whoami(self) -> str:
        try:
            review = client.AuthenticationV1Api(self.api_client).create_self_subject_review(
                client.V1SelfSubjectReview()
            )
        except ApiException as exc:
            if exc.status != 404:
                raise EnvironmentCheckError(
                    f"Not logged in to {self.server()}: {exc.status} {exc.reason}"
                ) from exc
            # SelfSubjectReview v1 is served from Kubernetes 1.28 (OpenShift 4.15).
            logger.debug("SelfSubjectReview not served; checking login with a namespace list")
            self._check_authenticated()
            return "unknown"
        except urllib3.exceptions.HTTPError as exc:
            raise EnvironmentCheckError(f"Cannot reach {self.server()}: {exc}") from exc
        user_info = review.status.user_info if review.status else None
        return (user_info.username if user_info else None) or "unknown"

    def _check_authenticated(self) -> None:
        """Raise EnvironmentCheckError unless an authenticated read succeeds."""
        try:
            self.core_api.list_namespace(limit=1)
        except ApiException as exc:
            raise EnvironmentCheckError(
                f"Not logged in to {self.server()}: {exc.status} {exc.reason}"
            ) from exc
        except urllib3.exceptions.HTTPError as exc:
            raise EnvironmentCheckError(f"Cannot reach {self.server()}: {exc}") from exc

    def server(self) -> str:
        return self.api_client.configuration.host
