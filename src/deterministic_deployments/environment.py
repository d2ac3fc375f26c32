"""Remote environment abstraction and its JSON-RPC implementation."""

import logging
from contextlib import contextmanager
from typing import ContextManager, Iterator, Protocol

import requests
from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_hash.auto import keccak
from eth_utils import to_checksum_address
from web3 import Web3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception

from .constants import (
    DEFAULT_POLL_INTERVAL,
    DEFAULT_RECEIPT_TIMEOUT,
    DEFAULT_TIMEOUT,
)
from .exceptions import RpcError, RpcTimeoutError
from .networks import NetworkCatalog
from .rpc import from_hex, rpc_request, to_hex
from .types import CallOutcome, Network

logger = logging.getLogger(__name__)


class NetworkContext(Protocol):
    """Capabilities bound to one active network and signing identity."""

    network: str
    sender: str

    def has_code(self, address: str) -> bool:
        ...

    def code_hash(self, address: str) -> str:
        ...

    def broadcast_call(self, target: str, payload: bytes, value: int = 0) -> CallOutcome:
        ...


class RemoteEnvironment(Protocol):
    """Per-network access to chain state and broadcasting."""

    def has_code(self, network: str, address: str) -> bool:
        ...

    def activate(self, network: str) -> ContextManager[NetworkContext]:
        ...


def load_account(private_key: str) -> LocalAccount:
    """
    Build a signing account from a hex private key.

    Raises:
        ValueError: If the key is malformed (the key itself is never echoed)
    """
    try:
        return Account.from_key(private_key)
    except Exception:
        # eth-keys raises its own ValidationError for wrong-length keys
        raise ValueError("Invalid deployer private key") from None


def fetch_code(rpc_url: str, address: str, timeout: float = DEFAULT_TIMEOUT) -> bytes:
    """
    Get runtime bytecode at an address.

    Returns:
        Bytecode (empty if no code)

    Raises:
        RpcError: If the RPC call fails
    """
    result = rpc_request(rpc_url, "eth_getCode", [address, "latest"], timeout)
    try:
        return from_hex(result or "0x")
    except (TypeError, ValueError, AttributeError) as e:
        raise RpcError(f"Malformed eth_getCode result for {address}", method="eth_getCode") from e


@contextmanager
def web3_errors(network: str, method: str) -> Iterator[None]:
    """
    Translate web3 and transport failures into RpcError.

    ContractLogicError (a revert) passes through for the caller to handle.
    Malformed results (TypeError, ValueError, KeyError) become RpcError.
    """
    try:
        yield
    except ContractLogicError:
        raise
    except TimeExhausted as e:
        raise RpcTimeoutError(f"{method} on '{network}' timed out: {e}", method=method) from e
    except requests.Timeout as e:
        raise RpcTimeoutError(f"{method} on '{network}' timed out", method=method) from e
    except requests.RequestException as e:
        raise RpcError(f"Network error during {method} on '{network}': {e}", method=method) from e
    except (Web3Exception, TypeError, ValueError, KeyError) as e:
        raise RpcError(f"{method} on '{network}' failed: {e}", method=method) from e


def connect(network: Network, timeout: float = DEFAULT_TIMEOUT) -> Web3:
    """Build a Web3 client for a network's RPC endpoint."""
    return Web3(Web3.HTTPProvider(network.rpc_url, request_kwargs={"timeout": timeout}))


class JsonRpcContext:
    """NetworkContext over JSON-RPC with a local signing account."""

    def __init__(
        self,
        network: Network,
        w3: Web3,
        account: LocalAccount,
        timeout: float = DEFAULT_TIMEOUT,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        self._network = network
        self._w3 = w3
        self._account = account
        self._timeout = timeout
        self._receipt_timeout = receipt_timeout
        self._poll_interval = poll_interval
        self._released = False

    @property
    def network(self) -> str:
        return self._network.name

    @property
    def sender(self) -> str:
        return self._account.address

    def release(self) -> None:
        self._released = True

    def _check_active(self) -> None:
        if self._released:
            raise RuntimeError(f"Context for network '{self.network}' has been released")

    def has_code(self, address: str) -> bool:
        return len(self._get_code(address)) > 0

    def code_hash(self, address: str) -> str:
        """
        Get keccak256 of the runtime bytecode at an address.

        Returns:
            0x-prefixed lowercase hex (EMPTY_CODE_HASH if no code)
        """
        return to_hex(keccak(self._get_code(address)))

    def _get_code(self, address: str) -> bytes:
        self._check_active()
        return fetch_code(self._network.rpc_url, address, self._timeout)

    def broadcast_call(self, target: str, payload: bytes, value: int = 0) -> CallOutcome:
        """
        Sign and send a call, waiting for it to be mined.

        The call is simulated first with eth_call to capture its return data;
        a simulated revert is reported without sending anything.

        Args:
            target: Call target address
            payload: Calldata
            value: Wei to send

        Returns:
            CallOutcome with receipt status and simulated return data

        Raises:
            RpcTimeoutError: If an RPC call or receipt wait times out
            RpcError: If the transport fails or a result is malformed
        """
        self._check_active()
        eth = self._w3.eth
        target = to_checksum_address(target)
        call = {
            "from": self.sender,
            "to": target,
            "data": to_hex(payload),
            "value": value,
        }

        try:
            with web3_errors(self.network, "eth_call"):
                return_data = bytes(eth.call(call))
        except ContractLogicError as e:
            logger.warning("Call to %s on %s reverted in simulation: %s", target, self.network, e)
            return CallOutcome(success=False, return_data=b"")

        try:
            with web3_errors(self.network, "eth_estimateGas"):
                gas_estimate = eth.estimate_gas(call)
        except ContractLogicError as e:
            logger.warning("Gas estimation for %s on %s failed: %s", target, self.network, e)
            return CallOutcome(success=False, return_data=return_data)

        with web3_errors(self.network, "eth_sendRawTransaction"):
            chain_id = self._network.chain_id
            if chain_id is None:
                chain_id = eth.chain_id

            transaction = {
                "to": target,
                "data": to_hex(payload),
                "value": value,
                "gas": int(gas_estimate * 1.2),
                "gasPrice": eth.gas_price,
                "nonce": eth.get_transaction_count(self.sender, "pending"),
                "chainId": chain_id,
            }
            signed = self._account.sign_transaction(transaction)
            tx_hash = eth.send_raw_transaction(signed.raw_transaction)
        logger.info("Sent transaction %s to %s on %s", to_hex(bytes(tx_hash)), target, self.network)

        with web3_errors(self.network, "eth_getTransactionReceipt"):
            receipt = eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=self._receipt_timeout,
                poll_latency=self._poll_interval,
            )
            success = receipt["status"] == 1
        return CallOutcome(success=success, return_data=return_data)


class JsonRpcEnvironment:
    """RemoteEnvironment backed by one JSON-RPC endpoint per network."""

    def __init__(
        self,
        catalog: NetworkCatalog,
        account: LocalAccount,
        timeout: float = DEFAULT_TIMEOUT,
        receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        """
        Initialize the environment.

        Args:
            catalog: Networks and their RPC endpoints
            account: Signing identity used for every network
            timeout: Seconds per RPC call
            receipt_timeout: Seconds to wait for a transaction to be mined
            poll_interval: Seconds between receipt polls
        """
        self._catalog = catalog
        self._account = account
        self._timeout = timeout
        self._receipt_timeout = receipt_timeout
        self._poll_interval = poll_interval

    def __repr__(self) -> str:
        return f"JsonRpcEnvironment(networks={self._catalog.list()!r}, sender={self._account.address})"

    def has_code(self, network: str, address: str) -> bool:
        rpc_url = self._catalog.get(network).rpc_url
        return len(fetch_code(rpc_url, address, self._timeout)) > 0

    @contextmanager
    def activate(self, network: str) -> Iterator[JsonRpcContext]:
        """
        Make a network the target of subsequent calls.

        Raises:
            NetworkNotFoundError: If network not in catalog
            RpcError: If the endpoint is unreachable or reports a different chain ID
        """
        net = self._catalog.get(network)
        w3 = connect(net, self._timeout)

        if net.chain_id is not None:
            with web3_errors(network, "eth_chainId"):
                observed = w3.eth.chain_id
            if observed != net.chain_id:
                raise RpcError(
                    f"RPC endpoint for '{network}' reports chain ID {observed}, "
                    f"expected {net.chain_id}",
                    method="eth_chainId",
                )

        context = JsonRpcContext(
            net,
            w3,
            self._account,
            timeout=self._timeout,
            receipt_timeout=self._receipt_timeout,
            poll_interval=self._poll_interval,
        )
        logger.debug("Activated network %s as %s", network, context.sender)
        try:
            yield context
        finally:
            context.release()
