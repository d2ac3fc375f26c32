"""Network catalog for deterministic-deployments library."""

import os
from typing import Dict, Iterable, Iterator, List, Optional

from .constants import NETWORK_CONFIG
from .exceptions import NetworkNotFoundError
from .types import Network


class NetworkCatalog:
    """
    Ordered, immutable registry of target networks.

    Order defines both the preflight check order and the deploy order.
    """

    def __init__(self, networks: Iterable[Network]):
        """
        Initialize the catalog.

        Args:
            networks: Networks in run order

        Raises:
            ValueError: If two networks share a name
        """
        self._networks: Dict[str, Network] = {}
        for network in networks:
            if network.name in self._networks:
                raise ValueError(f"Duplicate network '{network.name}' in catalog")
            self._networks[network.name] = network

    @classmethod
    def from_names(
        cls, names: Iterable[str], rpc_urls: Optional[Dict[str, str]] = None
    ) -> "NetworkCatalog":
        """
        Build a catalog from known network names.

        Args:
            names: Network names from NETWORK_CONFIG, in run order
            rpc_urls: Explicit RPC URLs by network name
                     (defaults to each network's $default_rpc_env)

        Returns:
            NetworkCatalog

        Raises:
            NetworkNotFoundError: If a name is not in NETWORK_CONFIG
            ValueError: If no RPC URL is available for a network
        """
        rpc_urls = rpc_urls or {}
        networks = []
        for name in names:
            if name not in NETWORK_CONFIG:
                raise NetworkNotFoundError(
                    f"Network '{name}' not configured "
                    f"(known: {', '.join(sorted(NETWORK_CONFIG))})"
                )
            config = NETWORK_CONFIG[name]

            rpc_url = rpc_urls.get(name) or os.environ.get(config["default_rpc_env"])
            if not rpc_url:
                raise ValueError(
                    f"RPC URL required for network '{name}': "
                    f"set ${config['default_rpc_env']} or pass rpc_urls"
                )

            networks.append(
                Network(
                    name=name,
                    rpc_url=rpc_url,
                    chain_id=config["chain_id"],
                    block_explorer_url=config["block_explorer_url"],
                )
            )
        return cls(networks)

    def list(self) -> List[str]:
        """Network identifiers in catalog order."""
        return list(self._networks.keys())

    def networks(self) -> List[Network]:
        return list(self._networks.values())

    def get(self, name: str) -> Network:
        """
        Get a network by name.

        Raises:
            NetworkNotFoundError: If network not in catalog
        """
        if name not in self._networks:
            raise NetworkNotFoundError(f"Network '{name}' not found in catalog")
        return self._networks[name]

    def __contains__(self, name: object) -> bool:
        return name in self._networks

    def __iter__(self) -> Iterator[Network]:
        return iter(list(self._networks.values()))

    def __len__(self) -> int:
        return len(self._networks)

    def __repr__(self) -> str:
        return f"NetworkCatalog({self.list()!r})"
