"""Command-line entry point for deterministic-deployments library."""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from .constants import (
    DEFAULT_PRIVATE_KEY_ENV,
    DEFAULT_TIMEOUT,
    DETERMINISTIC_FACTORY_ADDRESS,
    RPC_TIMEOUT_ENV,
)
from .environment import JsonRpcEnvironment, load_account
from .exceptions import DeploymentError, InvalidManifestError, ManifestNotFoundError, NetworkNotFoundError
from .manifests import load_manifest, manifest_networks
from .networks import NetworkCatalog
from .orchestrator import DeploymentOrchestrator
from .report import format_report, save_report
from .verifier import normalize_address

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2

REPORT_DIR = ".deployments"


def default_report_path(manifest: str) -> Path:
    """Report file for a manifest: ./.deployments/<manifest stem>.report.json"""
    return Path.cwd() / REPORT_DIR / f"{Path(manifest).stem}.report.json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="deterministic-deploy",
        description="Deploy one contract to many networks through a deterministic factory.",
    )
    parser.add_argument("manifest", help="Deployment manifest JSON file")
    parser.add_argument(
        "--network",
        "-n",
        action="append",
        dest="networks",
        default=None,
        help="Target network, repeatable; order is the deploy order "
        "(defaults to the manifest's 'networks')",
    )
    parser.add_argument(
        "--factory",
        default=DETERMINISTIC_FACTORY_ADDRESS,
        help="Deterministic factory address",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help=f"Seconds per RPC call (defaults to ${RPC_TIMEOUT_ENV} or {DEFAULT_TIMEOUT})",
    )
    parser.add_argument(
        "--preflight-workers",
        type=int,
        default=None,
        help="Check networks concurrently during preflight",
    )
    parser.add_argument(
        "--report",
        default=None,
        help=f"Where to save the JSON report (defaults to ./{REPORT_DIR}/<manifest stem>.report.json)",
    )
    parser.add_argument(
        "--preflight-only",
        action="store_true",
        help="Only check the factory and dependencies; never broadcast",
    )
    parser.add_argument(
        "--private-key-env",
        default=DEFAULT_PRIVATE_KEY_ENV,
        help="Environment variable holding the deployer private key",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def _resolve_timeout(value: Optional[float]) -> float:
    if value is not None:
        return value
    env_value = os.environ.get(RPC_TIMEOUT_ENV)
    if env_value:
        try:
            return float(env_value)
        except ValueError:
            raise ValueError(f"${RPC_TIMEOUT_ENV} must be a number, got '{env_value}'") from None
    return DEFAULT_TIMEOUT


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run a deployment from the command line.

    Returns:
        0 on success, 1 on deployment failure, 2 on configuration errors
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
    )

    try:
        request = load_manifest(args.manifest)
        networks = args.networks or manifest_networks(args.manifest)
        if not networks:
            raise ValueError("No networks given: pass --network or list 'networks' in the manifest")

        catalog = NetworkCatalog.from_names(networks)
        factory_address = normalize_address(args.factory)
        timeout = _resolve_timeout(args.timeout)

        private_key = os.environ.get(args.private_key_env)
        if not private_key:
            raise ValueError(f"Deployer key required: set ${args.private_key_env}")
        account = load_account(private_key)
    except (ManifestNotFoundError, InvalidManifestError, NetworkNotFoundError, ValueError) as e:
        logger.error("%s", e)
        return EXIT_CONFIG

    env = JsonRpcEnvironment(catalog, account, timeout=timeout)
    orchestrator = DeploymentOrchestrator(
        env,
        catalog,
        factory_address=factory_address,
        preflight_workers=args.preflight_workers,
    )

    if args.preflight_only:
        try:
            orchestrator.preflight(request)
        except DeploymentError as e:
            logger.error("Preflight failed: %s", e)
            return EXIT_FAILED
        logger.info("Preflight passed on %s", ", ".join(catalog.list()))
        return EXIT_OK

    report = orchestrator.run(request)

    for line in format_report(report):
        logger.info("%s", line)

    report_path = save_report(report, args.report or default_report_path(args.manifest))
    logger.info("Report saved to %s", report_path)

    for result in report.results:
        if result.verification_instruction:
            print(result.verification_instruction)

    return EXIT_OK if report.ok else EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
