"""Preflight dependency checks for deterministic-deployments library."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Optional, Sequence

from .environment import RemoteEnvironment
from .exceptions import MissingDependencyError, RpcError

logger = logging.getLogger(__name__)


def _require_code(env: RemoteEnvironment, network: str, address: str) -> None:
    try:
        present = env.has_code(network, address)
    except RpcError as e:
        # Timeout or transport failure: absence cannot be ruled out
        raise MissingDependencyError(network, address, uncertain=True) from e

    if not present:
        raise MissingDependencyError(network, address)


def check_network(
    env: RemoteEnvironment,
    network: str,
    factory_address: str,
    dependencies: Iterable[str],
) -> None:
    """
    Check that the factory and all dependencies have code on a network.

    Read-only: nothing is signed or broadcast.

    Args:
        env: Remote environment
        network: Network name
        factory_address: Deterministic factory address (checked first)
        dependencies: Dependency addresses, checked in declaration order

    Raises:
        MissingDependencyError: For the first address without code
    """
    _require_code(env, network, factory_address)
    for address in dependencies:
        _require_code(env, network, address)
    logger.info("Preflight passed on %s", network)


def preflight(
    env: RemoteEnvironment,
    networks: Sequence[str],
    factory_address: str,
    dependencies: Sequence[str],
    max_workers: Optional[int] = None,
) -> None:
    """
    Run dependency checks on every network.

    Sequential and fail-fast unless max_workers > 1, in which case networks
    are checked concurrently. Either way the reported failure is the first
    in network order.

    Args:
        env: Remote environment
        networks: Network names, in catalog order
        factory_address: Deterministic factory address
        dependencies: Dependency addresses
        max_workers: Parallel workers (None or 1 for sequential)

    Raises:
        MissingDependencyError: First failing network's first missing address
    """
    if max_workers is None or max_workers <= 1 or len(networks) <= 1:
        for network in networks:
            check_network(env, network, factory_address, dependencies)
        return

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [
            executor.submit(check_network, env, network, factory_address, dependencies)
            for network in networks
        ]

    # All futures have completed; surface the first failure by network order
    for future in futures:
        error = future.exception()
        if error is not None:
            raise error
