"""
Abstraction for running oc against the cluster.

LocalOcRunner runs oc locally, optionally with an explicit KUBECONFIG.
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Optional

from hanging_resources.errors import EnvironmentCheckError


class OcRunner:
    """
    Runs oc commands against the cluster.
    Implementations: LocalOcRunner (local oc binary); tests provide fakes.
    """

    def oc(
        self,
        *args: str,
        timeout: Optional[int] = None,
    ) -> subprocess.CompletedProcess:
        """Run oc with given args and return the completed process."""
        raise NotImplementedError


class LocalOcRunner(OcRunner):
    """Run oc locally, using the current login unless a kubeconfig is given."""

    def __init__(self, kubeconfig_path: str | Path | None = None) -> None:
        self.kubeconfig: Path | None = None
        if kubeconfig_path:
            self.kubeconfig = Path(kubeconfig_path).expanduser().resolve()
            if not self.kubeconfig.exists():
                raise EnvironmentCheckError(f"Kubeconfig not found: {self.kubeconfig}")

    def oc(
        self,
        *args: str,
        timeout: Optional[int] = None,
    ) -> subprocess.CompletedProcess:
        env = dict(os.environ)
        if self.kubeconfig:
            env["KUBECONFIG"] = str(self.kubeconfig)
        return subprocess.run(
            ["oc"] + list(args),
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
