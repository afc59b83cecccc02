"""
Sweep configuration.

Settings come from an optional YAML file; command-line flags override them.
The resource type catalog is not configurable.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from hanging_resources.constants import BACKEND_OC, BACKENDS, DEFAULT_OC_TIMEOUT


@dataclass
class SweepConfig:
    """Options for one sweep run."""

    # Explicit kubeconfig; None uses the current oc login / default kubeconfig
    kubeconfig: Optional[str] = None
    # "oc" (oc CLI) or "api" (kubernetes Python client)
    backend: str = BACKEND_OC
    # Log what would be patched without patching
    dry_run: bool = False
    # Per oc call timeout (seconds)
    oc_timeout: int = DEFAULT_OC_TIMEOUT
    verbose: bool = False


def expand_path(path: str | None) -> str | None:
    """Expand ~ and environment variables in a path."""
    if path is None:
        return None
    return os.path.expanduser(os.path.expandvars(path))


def load_config_file(config_path: str | Path) -> dict[str, Any]:
    """
    Load configuration from a YAML file.

    Raises:
        FileNotFoundError: If the config file doesn't exist
        yaml.YAMLError: If the file contains invalid YAML
    """
    config_path = Path(config_path).expanduser()

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        config = yaml.safe_load(f)

    return config or {}


def parse_config(raw_config: dict[str, Any]) -> SweepConfig:
    """
    Parse a raw configuration mapping into SweepConfig.

    Raises:
        KeyError: If the mapping contains keys SweepConfig does not know
        ValueError: If the backend or timeout is invalid
    """
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration file must contain a mapping")

    known = {f.name for f in fields(SweepConfig)}
    unknown = sorted(set(raw_config) - known)
    if unknown:
        raise KeyError(
            f"Unknown config key(s): {', '.join(unknown)}. "
            f"Supported keys: {', '.join(sorted(known))}."
        )

    cfg = SweepConfig(**raw_config)
    cfg.kubeconfig = expand_path(cfg.kubeconfig)
    cfg.dry_run = bool(cfg.dry_run)
    cfg.verbose = bool(cfg.verbose)
    validate_config(cfg)
    return cfg


def validate_config(cfg: SweepConfig) -> None:
    if cfg.backend not in BACKENDS:
        raise ValueError(
            f"Unsupported backend {cfg.backend!r}; expected one of {', '.join(BACKENDS)}"
        )
    if isinstance(cfg.oc_timeout, bool) or not isinstance(cfg.oc_timeout, int) or cfg.oc_timeout <= 0:
        raise ValueError(f"oc_timeout must be a positive integer, got {cfg.oc_timeout!r}")


def load_sweep_config(config_path: str | Path | None = None) -> SweepConfig:
    """Load SweepConfig from a YAML file, or return defaults when no file is given."""
    if config_path is None:
        return SweepConfig()
    return parse_config(load_config_file(config_path))
