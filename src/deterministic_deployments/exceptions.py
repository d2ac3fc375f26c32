"""Custom exception classes for deterministic-deployments library."""

from typing import Optional


class DeploymentError(Exception):
    """Base exception for deployment-related errors."""

    pass


class NetworkNotFoundError(DeploymentError, ValueError):
    """Raised when requested network is not configured."""

    pass


class ManifestNotFoundError(DeploymentError, FileNotFoundError):
    """Raised when a deployment manifest file is not found."""

    pass


class InvalidManifestError(DeploymentError, ValueError):
    """Raised when a deployment manifest is missing or has malformed fields."""

    pass


class RpcError(DeploymentError, RuntimeError):
    """Raised when a JSON-RPC call fails."""

    def __init__(self, message: str, method: Optional[str] = None, code: Optional[int] = None):
        super().__init__(message)
        self.method = method
        self.code = code


class RpcTimeoutError(RpcError, TimeoutError):
    """Raised when a JSON-RPC call does not complete within its timeout."""

    pass


class MissingDependencyError(DeploymentError, LookupError):
    """Raised when the factory or a dependency has no code on a network."""

    def __init__(self, network: str, address: str, uncertain: bool = False):
        self.network = network
        self.address = address
        # True when the code lookup itself failed, so absence could not be confirmed
        self.uncertain = uncertain
        if uncertain:
            message = f"Could not confirm code at {address} on network '{network}'"
        else:
            message = f"Missing dependency on network '{network}': no code at {address}"
        super().__init__(message)


class DeployFailedError(DeploymentError, RuntimeError):
    """Raised when the factory call reverted or produced no code."""

    def __init__(
        self,
        network: str,
        success: bool,
        address: Optional[str],
        reason: str = "",
    ):
        self.network = network
        self.success = success
        self.address = address
        self.reason = reason
        message = (
            f"Deployment failed on network '{network}' "
            f"(success={success}, address={address})"
        )
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UnexpectedDeployedAddressError(DeploymentError, ValueError):
    """Raised when the deployed address differs from the expected address."""

    def __init__(self, expected: str, actual: Optional[str], network: Optional[str] = None):
        self.network = network
        self.expected = expected
        self.actual = actual
        where = f" on network '{network}'" if network else ""
        super().__init__(
            f"Unexpected deployed address{where}: expected {expected}, got {actual}"
        )


class UnexpectedDeployedCodeHashError(DeploymentError, ValueError):
    """Raised when the deployed code hash differs from the expected hash."""

    def __init__(self, expected: str, actual: str, network: Optional[str] = None):
        self.network = network
        self.expected = expected
        self.actual = actual
        where = f" on network '{network}'" if network else ""
        super().__init__(
            f"Unexpected deployed code hash{where}: expected {expected}, got {actual}"
        )


class RunCancelledError(DeploymentError):
    """Raised when a run is cancelled between two networks."""

    def __init__(self, network: str):
        self.network = network
        super().__init__(f"Run cancelled before network '{network}'")


class ReportConflictError(DeploymentError, ValueError):
    """Raised when a network's result would be recorded twice."""

    pass
