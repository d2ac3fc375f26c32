"""Deterministic factory invocation for deterministic-deployments library."""

import logging
from typing import Optional

from eth_utils import to_checksum_address

from .constants import DETERMINISTIC_FACTORY_ADDRESS, ZERO_ADDRESS, ZERO_SALT
from .environment import NetworkContext
from .exceptions import DeployFailedError, RpcError

logger = logging.getLogger(__name__)


def encode_factory_call(salt: bytes, code: bytes) -> bytes:
    """
    Build calldata for the deterministic deployment proxy.

    Args:
        salt: 32-byte CREATE2 salt
        code: Creation code

    Returns:
        salt || code

    Raises:
        ValueError: If salt is not 32 bytes
    """
    if len(salt) != 32:
        raise ValueError(f"Salt must be 32 bytes, got {len(salt)}")
    return salt + code


def decode_factory_result(return_data: bytes) -> Optional[str]:
    """
    Extract the deployed address from factory return data.

    Accepts 20 raw address bytes or a 32-byte ABI-encoded address word.

    Returns:
        Checksummed address, or None if return data is not an address
    """
    if len(return_data) == 20:
        raw = return_data
    elif len(return_data) == 32 and not any(return_data[:12]):
        raw = return_data[12:]
    else:
        return None
    return to_checksum_address(raw)


def deploy(
    context: NetworkContext,
    code: bytes,
    salt: bytes = ZERO_SALT,
    factory_address: str = DETERMINISTIC_FACTORY_ADDRESS,
) -> str:
    """
    Deploy code through the deterministic factory on the active network.

    Success requires the call to succeed, a non-zero returned address, and
    code present at that address afterwards.

    Args:
        context: Active network context
        code: Creation code
        salt: 32-byte CREATE2 salt
        factory_address: Deterministic factory address

    Returns:
        Checksummed deployed address

    Raises:
        DeployFailedError: On revert, zero/missing address, or no code at the address
    """
    payload = encode_factory_call(salt, code)
    logger.info("Deploying %d bytes via factory %s on %s", len(code), factory_address, context.network)

    try:
        outcome = context.broadcast_call(factory_address, payload, 0)
    except RpcError as e:
        raise DeployFailedError(context.network, False, None, reason=str(e)) from e

    address = decode_factory_result(outcome.return_data)

    if not outcome.success:
        raise DeployFailedError(context.network, False, address, reason="factory call reverted")

    if address is None or address == ZERO_ADDRESS:
        raise DeployFailedError(
            context.network, True, address, reason="factory returned no address"
        )

    try:
        has_code = context.has_code(address)
    except RpcError as e:
        raise DeployFailedError(context.network, True, address, reason=str(e)) from e

    if not has_code:
        raise DeployFailedError(
            context.network, True, address, reason="no code at returned address"
        )

    logger.info("Deployed %s on %s", address, context.network)
    return address
