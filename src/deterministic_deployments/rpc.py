"""JSON-RPC transport for deterministic-deployments library."""

import itertools
import logging
from typing import Any, List

import requests

from .constants import DEFAULT_TIMEOUT
from .exceptions import RpcError, RpcTimeoutError

logger = logging.getLogger(__name__)

_request_ids = itertools.count(1)


def to_hex(data: bytes) -> str:
    """Encode bytes as 0x-prefixed lowercase hex."""
    return "0x" + data.hex()


def from_hex(value: str) -> bytes:
    """
    Decode 0x-prefixed (or bare) hex into bytes.

    Raises:
        ValueError: If value is not valid hex
    """
    if value.startswith(("0x", "0X")):
        value = value[2:]
    if len(value) % 2:
        value = "0" + value
    return bytes.fromhex(value)


def rpc_request(
    rpc_url: str,
    method: str,
    params: List[Any],
    timeout: float = DEFAULT_TIMEOUT,
) -> Any:
    """
    Make a single JSON-RPC call.

    Args:
        rpc_url: RPC endpoint URL
        method: JSON-RPC method, e.g., "eth_getCode"
        params: Method parameters
        timeout: Seconds before the call is abandoned

    Returns:
        The "result" member of the response

    Raises:
        RpcTimeoutError: If the call times out
        RpcError: If the HTTP request fails or the RPC returns an error
    """
    request_id = next(_request_ids)
    logger.debug("RPC %s %s (id=%d)", method, params, request_id)

    try:
        response = requests.post(
            rpc_url,
            json={
                "jsonrpc": "2.0",
                "method": method,
                "params": params,
                "id": request_id,
            },
            timeout=timeout,
        )
    except requests.Timeout as e:
        raise RpcTimeoutError(
            f"RPC call {method} timed out after {timeout}s", method=method
        ) from e
    except requests.RequestException as e:
        raise RpcError(f"Network error during RPC call {method}: {e}", method=method) from e

    # Check for HTTP errors
    if response.status_code != 200:
        raise RpcError(
            f"RPC request {method} failed with status {response.status_code}",
            method=method,
        )

    try:
        result = response.json()
    except ValueError as e:
        raise RpcError(f"Invalid JSON in RPC response to {method}", method=method) from e

    # Check for RPC errors
    if "error" in result:
        error = result["error"]
        if not isinstance(error, dict):
            error = {"message": str(error)}
        raise RpcError(
            f"RPC error in {method}: {error.get('message', error)}",
            method=method,
            code=error.get("code"),
        )

    if "result" not in result:
        raise RpcError(f"RPC response to {method} has no result", method=method)

    return result["result"]
