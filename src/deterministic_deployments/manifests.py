"""Deployment manifest parsing for deterministic-deployments library."""

import json
from pathlib import Path
from typing import Any, Dict, List, Union

from .exceptions import InvalidManifestError, ManifestNotFoundError
from .rpc import from_hex
from .types import DeploymentRequest
from .verifier import normalize_address, normalize_code_hash

REQUIRED_FIELDS = ("bytecode", "address", "codehash", "label")


def _read_manifest(file_path: Union[Path, str]) -> Dict[str, Any]:
    path = Path(file_path)
    if not path.exists():
        raise ManifestNotFoundError(f"Deployment manifest not found at {path}")

    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidManifestError(f"Invalid JSON in deployment manifest {path}: {e}") from e

    if not isinstance(data, dict):
        raise InvalidManifestError(f"Deployment manifest {path} must be a JSON object")
    return data


def parse_manifest(data: Dict[str, Any], source: str = "<manifest>") -> DeploymentRequest:
    """
    Build a DeploymentRequest from manifest data.

    Args:
        data: Manifest dictionary
        source: Name used in error messages

    Returns:
        DeploymentRequest

    Raises:
        InvalidManifestError: If a required field is missing or malformed
    """
    missing = [name for name in REQUIRED_FIELDS if name not in data]
    if missing:
        raise InvalidManifestError(f"Missing fields in {source}: {', '.join(missing)}")

    try:
        code = from_hex(data["bytecode"])
    except (TypeError, ValueError, AttributeError) as e:
        raise InvalidManifestError(f"Malformed bytecode in {source}") from e
    if not code:
        raise InvalidManifestError(f"Empty bytecode in {source}")

    try:
        expected_address = normalize_address(data["address"])
    except (TypeError, ValueError) as e:
        raise InvalidManifestError(f"Malformed address in {source}: {data['address']}") from e

    try:
        expected_code_hash = normalize_code_hash(data["codehash"])
    except (TypeError, ValueError, AttributeError) as e:
        raise InvalidManifestError(f"Malformed codehash in {source}: {data['codehash']}") from e

    dependencies = data.get("dependencies", [])
    if not isinstance(dependencies, list):
        raise InvalidManifestError(f"'dependencies' in {source} must be a list")
    try:
        dependencies = [normalize_address(address) for address in dependencies]
    except (TypeError, ValueError) as e:
        raise InvalidManifestError(f"Malformed dependency address in {source}: {e}") from e

    request_args: Dict[str, Any] = {}
    if "salt" in data:
        try:
            salt = from_hex(data["salt"])
        except (TypeError, ValueError, AttributeError) as e:
            raise InvalidManifestError(f"Malformed salt in {source}") from e
        if len(salt) != 32:
            raise InvalidManifestError(f"Salt in {source} must be 32 bytes, got {len(salt)}")
        request_args["salt"] = salt

    return DeploymentRequest(
        code=code,
        expected_address=expected_address,
        expected_code_hash=expected_code_hash,
        dependencies=tuple(dependencies),
        verification_label=str(data["label"]),
        **request_args,
    )


def load_manifest(file_path: Union[Path, str]) -> DeploymentRequest:
    """
    Load a DeploymentRequest from a JSON manifest file.

    Manifest format:
        {
            "label": "src/Counter.sol:Counter",
            "bytecode": "0x6080...",
            "address": "0x...",
            "codehash": "0x...",
            "dependencies": ["0x..."],   # optional
            "salt": "0x00...00",         # optional, 32 bytes
            "networks": ["mainnet"]      # optional
        }

    Raises:
        ManifestNotFoundError: If the file doesn't exist
        InvalidManifestError: If the file is malformed
    """
    return parse_manifest(_read_manifest(file_path), source=str(file_path))


def manifest_networks(file_path: Union[Path, str]) -> List[str]:
    """
    Get the default network list declared in a manifest.

    Returns:
        Network names in declared order (empty if none declared)

    Raises:
        ManifestNotFoundError: If the file doesn't exist
        InvalidManifestError: If 'networks' is not a list of strings
    """
    networks = _read_manifest(file_path).get("networks", [])
    if not isinstance(networks, list) or not all(isinstance(n, str) for n in networks):
        raise InvalidManifestError(f"'networks' in {file_path} must be a list of names")
    return networks
