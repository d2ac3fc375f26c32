"""Shared pytest fixtures for deterministic-deployments tests."""

import json
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest
from eth_hash.auto import keccak

from deterministic_deployments.constants import DETERMINISTIC_FACTORY_ADDRESS
from deterministic_deployments.exceptions import RpcTimeoutError
from deterministic_deployments.networks import NetworkCatalog
from deterministic_deployments.rpc import to_hex
from deterministic_deployments.types import CallOutcome, DeploymentRequest, Network

CREATION_CODE = bytes.fromhex("600a600c600039600a6000f3602a60005260206000f3")
RUNTIME_CODE = bytes.fromhex("602a60005260206000f3")
RUNTIME_CODE_HASH = to_hex(keccak(RUNTIME_CODE))

EXPECTED_ADDRESS = "0x1234567890abcdef1234567890abcdef12345678"
OTHER_ADDRESS = "0x00000000000000000000000000000000deadbeef"
DEPENDENCY_A = "0x1111111111111111111111111111111111111111"
DEPENDENCY_B = "0x2222222222222222222222222222222222222222"

NETWORK_NAMES = ["net1", "net2", "net3"]


class FakeContext:
    """NetworkContext over FakeEnvironment state."""

    def __init__(self, env: "FakeEnvironment", network: str):
        self._env = env
        self.network = network
        self.sender = "0x000000000000000000000000000000000000dEaD"
        self.released = False

    def _check(self):
        assert not self.released, "context used after release"

    def has_code(self, address: str) -> bool:
        self._check()
        return self._env.has_code(self.network, address)

    def code_hash(self, address: str) -> str:
        self._check()
        return to_hex(keccak(self._env.code_at(self.network, address)))

    def broadcast_call(self, target: str, payload: bytes, value: int = 0) -> CallOutcome:
        self._check()
        self._env.broadcasts.append((self.network, target, payload, value))
        return self._env.factory_call(self.network, target, payload)


class FakeEnvironment:
    """
    In-memory RemoteEnvironment.

    The factory deploys RUNTIME_CODE at `deploy_address`. Per-network
    behaviour can be changed through `factory_mode`:
    "ok", "revert", "ghost", "wrong_address", "wrong_code", "error".
    """

    def __init__(self, networks: List[str]):
        self.networks = list(networks)
        self.code: Dict[str, Dict[str, bytes]] = {n: {} for n in networks}
        self.broadcasts: List[Tuple[str, str, bytes, int]] = []
        self.code_checks: List[Tuple[str, str]] = []
        self.activations: List[str] = []
        self.factory_mode: Dict[str, str] = {}
        self.code_check_errors: Dict[str, Exception] = {}
        self.deploy_address = EXPECTED_ADDRESS
        self.factory_address = DETERMINISTIC_FACTORY_ADDRESS
        self.active: Optional[str] = None

    def set_code(self, network: str, address: str, code: bytes = b"\x60\x00") -> None:
        self.code[network][address.lower()] = code

    def code_at(self, network: str, address: str) -> bytes:
        return self.code[network].get(address.lower(), b"")

    def has_code(self, network: str, address: str) -> bool:
        self.code_checks.append((network, address))
        if network in self.code_check_errors:
            raise self.code_check_errors[network]
        return len(self.code_at(network, address)) > 0

    def factory_deploys(self) -> List[str]:
        """Networks on which the factory was called."""
        return [
            network
            for network, target, _, _ in self.broadcasts
            if target.lower() == self.factory_address.lower()
        ]

    def factory_call(self, network: str, target: str, payload: bytes) -> CallOutcome:
        mode = self.factory_mode.get(network, "ok")
        address = bytes.fromhex(self.deploy_address[2:])
        if mode == "error":
            raise RpcTimeoutError("timed out", method="eth_sendRawTransaction")
        if mode == "revert":
            return CallOutcome(success=False, return_data=b"")
        if mode == "ghost":
            return CallOutcome(success=True, return_data=address)
        if mode == "wrong_address":
            self.set_code(network, OTHER_ADDRESS, RUNTIME_CODE)
            return CallOutcome(success=True, return_data=bytes.fromhex(OTHER_ADDRESS[2:]))
        if mode == "wrong_code":
            self.set_code(network, self.deploy_address, RUNTIME_CODE + b"\x00")
            return CallOutcome(success=True, return_data=address)
        self.set_code(network, self.deploy_address, RUNTIME_CODE)
        return CallOutcome(success=True, return_data=address)

    @contextmanager
    def activate(self, network: str):
        assert self.active is None, "two networks active at once"
        self.activations.append(network)
        self.active = network
        context = FakeContext(self, network)
        try:
            yield context
        finally:
            context.released = True
            self.active = None


@pytest.fixture
def fake_env() -> FakeEnvironment:
    """FakeEnvironment where every network has the factory and both dependencies."""
    env = FakeEnvironment(NETWORK_NAMES)
    for network in NETWORK_NAMES:
        env.set_code(network, DETERMINISTIC_FACTORY_ADDRESS)
        env.set_code(network, DEPENDENCY_A)
        env.set_code(network, DEPENDENCY_B)
    return env


@pytest.fixture
def catalog() -> NetworkCatalog:
    """Catalog of the fake networks, in order."""
    return NetworkCatalog(
        Network(name=name, rpc_url=f"http://{name}.example.com") for name in NETWORK_NAMES
    )


@pytest.fixture
def deployment_request() -> DeploymentRequest:
    """Request with two dependencies."""
    return DeploymentRequest(
        code=CREATION_CODE,
        expected_address=EXPECTED_ADDRESS,
        expected_code_hash=RUNTIME_CODE_HASH,
        dependencies=(DEPENDENCY_A, DEPENDENCY_B),
        verification_label="src/Answer.sol:Answer",
    )


@pytest.fixture
def manifest_data() -> Dict[str, Any]:
    """Valid manifest dictionary."""
    return {
        "label": "src/Answer.sol:Answer",
        "bytecode": to_hex(CREATION_CODE),
        "address": EXPECTED_ADDRESS,
        "codehash": RUNTIME_CODE_HASH,
        "dependencies": [DEPENDENCY_A, DEPENDENCY_B],
        "networks": ["mainnet", "base"],
    }


@pytest.fixture
def manifest_file(tmp_path: Path, manifest_data: Dict[str, Any]) -> Path:
    """Write the valid manifest to a temporary file."""
    path = tmp_path / "answer.json"
    with open(path, "w") as f:
        json.dump(manifest_data, f, indent=2)
    return path
