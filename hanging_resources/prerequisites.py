"""
Verify the client tooling and cluster login before anything is patched.
"""

from __future__ import annotations

import logging
import shutil
from typing import TYPE_CHECKING

from hanging_resources.constants import BACKEND_OC
from hanging_resources.errors import EnvironmentCheckError

if TYPE_CHECKING:
    from hanging_resources.cluster import ClusterClient

logger = logging.getLogger(__name__)


def verify_environment(cluster: ClusterClient, backend: str = BACKEND_OC) -> str:
    """
    Check that the cluster can be queried and return the logged-in user.
    The oc backend additionally needs the oc binary on PATH.
    """
    if backend == BACKEND_OC and shutil.which("oc") is None:
        raise EnvironmentCheckError("oc not found. Install OpenShift CLI.")
    user = cluster.whoami()
    logger.debug("Logged in as %s", user)
    return user
