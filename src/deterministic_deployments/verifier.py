"""Deployment decision and verification for deterministic-deployments library."""

from typing import Optional

from eth_utils import is_address, to_checksum_address

from .exceptions import UnexpectedDeployedAddressError, UnexpectedDeployedCodeHashError
from .types import Action


def normalize_address(address: str) -> str:
    """
    Convert address to checksummed form.

    Raises:
        ValueError: If address is not a valid 20-byte hex address
    """
    if not is_address(address):
        raise ValueError(f"Invalid address: {address}")
    return to_checksum_address(address)


def normalize_code_hash(code_hash: str) -> str:
    """
    Convert code hash to 0x-prefixed lowercase hex.

    Raises:
        ValueError: If code_hash is not 32 bytes of hex
    """
    value = code_hash.lower()
    if value.startswith("0x"):
        value = value[2:]
    if len(value) != 64 or len(bytes.fromhex(value)) != 32:
        raise ValueError(f"Invalid code hash: {code_hash}")
    return "0x" + value


def decide_action(expected_address: str, address_has_code: bool) -> Action:
    """
    Decide whether a network needs a deployment.

    Args:
        expected_address: Address the factory produces for this code
        address_has_code: Whether expected_address already has code

    Returns:
        SKIP_ALREADY_PRESENT if code is there, DEPLOY otherwise
    """
    if address_has_code:
        return Action.SKIP_ALREADY_PRESENT
    return Action.DEPLOY


def verify_outcome(
    deployed_address: Optional[str],
    expected_address: str,
    observed_code_hash: str,
    expected_code_hash: str,
    network: Optional[str] = None,
) -> None:
    """
    Check a deployment's address and runtime code hash.

    Applies to both freshly deployed and already-present code.

    Raises:
        UnexpectedDeployedAddressError: If addresses differ
        UnexpectedDeployedCodeHashError: If code hashes differ
    """
    expected = normalize_address(expected_address)
    if deployed_address is None or not is_address(deployed_address) or (
        to_checksum_address(deployed_address) != expected
    ):
        raise UnexpectedDeployedAddressError(expected, deployed_address, network=network)

    expected_hash = normalize_code_hash(expected_code_hash)
    try:
        observed_hash = normalize_code_hash(observed_code_hash)
    except ValueError:
        observed_hash = observed_code_hash
    if observed_hash != expected_hash:
        raise UnexpectedDeployedCodeHashError(expected_hash, observed_hash, network=network)
