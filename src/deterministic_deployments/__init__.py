"""
deterministic-deployments: deploy one contract to many EVM networks through a
deterministic factory, and verify the result on each
"""

from importlib.metadata import PackageNotFoundError, version

from .environment import JsonRpcEnvironment, NetworkContext, RemoteEnvironment, load_account
from .exceptions import (
    DeployFailedError,
    DeploymentError,
    InvalidManifestError,
    ManifestNotFoundError,
    MissingDependencyError,
    NetworkNotFoundError,
    ReportConflictError,
    RpcError,
    RpcTimeoutError,
    RunCancelledError,
    UnexpectedDeployedAddressError,
    UnexpectedDeployedCodeHashError,
)
from .manifests import load_manifest
from .networks import NetworkCatalog
from .orchestrator import DeploymentOrchestrator
from .types import (
    Action,
    CallOutcome,
    DeploymentOutcome,
    DeploymentReport,
    DeploymentRequest,
    DeploymentResult,
    Network,
    RunState,
)

try:
    __version__ = version("deterministic-deployments")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "DeploymentOrchestrator",
    "NetworkCatalog",
    "JsonRpcEnvironment",
    "RemoteEnvironment",
    "NetworkContext",
    "load_account",
    "load_manifest",
    "Network",
    "DeploymentRequest",
    "DeploymentResult",
    "DeploymentReport",
    "DeploymentOutcome",
    "CallOutcome",
    "Action",
    "RunState",
    "DeploymentError",
    "MissingDependencyError",
    "DeployFailedError",
    "UnexpectedDeployedAddressError",
    "UnexpectedDeployedCodeHashError",
    "NetworkNotFoundError",
    "ManifestNotFoundError",
    "InvalidManifestError",
    "RpcError",
    "RpcTimeoutError",
    "RunCancelledError",
    "ReportConflictError",
]
