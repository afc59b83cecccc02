"""
Command-line entry point for the hanging resources sweep.

Usage:
  delete-hanging-resources                 # patch finalizers of Terminating resources
  delete-hanging-resources --dry-run       # only report what would be patched
  delete-hanging-resources --backend api   # use the Kubernetes API instead of oc

Run after an OpenShift AI cleanup if objects are stuck in Terminating.
"""

from __future__ import annotations

import argparse
import logging
import sys

import yaml

from hanging_resources.cluster import ClusterClient, KubeApiClusterClient, OcClusterClient
from hanging_resources.config import SweepConfig, expand_path, load_sweep_config, validate_config
from hanging_resources.constants import BACKEND_API, BACKENDS, BANNER_WIDTH
from hanging_resources.errors import EnvironmentCheckError
from hanging_resources.oc_runner import LocalOcRunner
from hanging_resources.prerequisites import verify_environment
from hanging_resources.sweep import sweep_hanging_resources

logger = logging.getLogger(__name__)

LOG_FORMAT = "[%(levelname)s] %(message)s"


def parse_args(argv: list[str] | None = None) -> tuple[argparse.Namespace, list[str]]:
    parser = argparse.ArgumentParser(
        prog="delete-hanging-resources",
        description="Remove finalizers from resources stuck in Terminating.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
        epilog="""
Examples:
  %(prog)s --dry-run
  %(prog)s --kubeconfig ~/.kube/rhoai --backend api
""",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Show what would be patched without changing the cluster.",
    )
    parser.add_argument(
        "--kubeconfig",
        default=None,
        help="Kubeconfig to use instead of the current login.",
    )
    parser.add_argument(
        "--backend",
        choices=BACKENDS,
        default=None,
        help="Cluster access: oc CLI (default) or the Kubernetes API.",
    )
    parser.add_argument(
        "-c", "--config",
        dest="config_file",
        default=None,
        help="Optional YAML file with sweep settings.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=None,
        help="Enable debug logging.",
    )
    return parser.parse_known_args(argv)


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        force=True,
    )
    # The API client logs every request at DEBUG.
    logging.getLogger("kubernetes").setLevel(logging.INFO)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def resolve_config(args: argparse.Namespace) -> SweepConfig:
    """Load the config file (if any) and apply command-line overrides."""
    cfg = load_sweep_config(args.config_file)
    if args.dry_run is not None:
        cfg.dry_run = args.dry_run
    if args.kubeconfig is not None:
        cfg.kubeconfig = expand_path(args.kubeconfig)
    if args.backend is not None:
        cfg.backend = args.backend
    if args.verbose is not None:
        cfg.verbose = args.verbose
    validate_config(cfg)
    return cfg


def build_cluster_client(cfg: SweepConfig) -> ClusterClient:
    if cfg.backend == BACKEND_API:
        return KubeApiClusterClient.from_kubeconfig(cfg.kubeconfig)
    return OcClusterClient(LocalOcRunner(cfg.kubeconfig), timeout=cfg.oc_timeout)


def log_banner(cluster: ClusterClient, dry_run: bool) -> None:
    logger.info("=" * BANNER_WIDTH)
    logger.info("Hanging (Terminating) resources cleanup")
    logger.info("=" * BANNER_WIDTH)
    if dry_run:
        logger.warning("DRY-RUN: no changes will be made.")
    logger.info("Cluster: %s", cluster.server())


def main(argv: list[str] | None = None) -> int:
    args, unknown = parse_args(argv)

    try:
        cfg = resolve_config(args)
    except (FileNotFoundError, KeyError, ValueError, TypeError, yaml.YAMLError) as e:
        configure_logging()
        logger.error("Invalid configuration: %s", e)
        return 1

    configure_logging(cfg.verbose)
    for arg in unknown:
        logger.warning("Ignoring unrecognized argument: %s", arg)

    try:
        cluster = build_cluster_client(cfg)
        verify_environment(cluster, backend=cfg.backend)
    except EnvironmentCheckError as e:
        logger.error("%s", e)
        return 1

    log_banner(cluster, cfg.dry_run)
    try:
        sweep_hanging_resources(cluster, dry_run=cfg.dry_run)
    except KeyboardInterrupt:
        logger.warning("Interrupted. Some resources may not have been patched; re-run to continue.")
        return 130
    logger.info("=" * BANNER_WIDTH)
    return 0


if __name__ == "__main__":
    sys.exit(main())
