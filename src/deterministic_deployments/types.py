"""Data types and dataclasses for deterministic-deployments library."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from eth_utils import is_address, to_checksum_address

from .constants import ZERO_SALT
from .exceptions import ReportConflictError


@dataclass(frozen=True)
class Network:
    """A target network."""

    name: str  # Unique within a catalog, e.g., "mainnet"
    rpc_url: str
    chain_id: Optional[int] = None  # Checked against eth_chainId when set
    block_explorer_url: Optional[str] = None


@dataclass(frozen=True)
class DeploymentRequest:
    """One logical deployment, identical on every network of a run."""

    code: bytes  # Creation payload
    expected_address: str
    expected_code_hash: str  # keccak256 of the runtime bytecode
    dependencies: Tuple[str, ...] = ()
    verification_label: str = ""
    salt: bytes = ZERO_SALT

    def __post_init__(self):
        # Keep declaration order, drop duplicates (case-insensitive for addresses)
        normalized = (
            to_checksum_address(dep) if is_address(dep) else dep
            for dep in self.dependencies
        )
        deduped = tuple(dict.fromkeys(normalized))
        object.__setattr__(self, "dependencies", deduped)


@dataclass(frozen=True)
class CallOutcome:
    """Raw outcome of a broadcast call."""

    success: bool
    return_data: bytes = b""


class Action(Enum):
    """What to do on a network."""

    DEPLOY = "deploy"
    SKIP_ALREADY_PRESENT = "skip"


class DeploymentOutcome(Enum):
    """
    Per-network outcome.

    Value strings define de/serialization law.
    """

    DEPLOYED = "deployed"
    SKIPPED_ALREADY_PRESENT = "skipped-already-present"
    FAILED = "failed"


class RunState(Enum):
    """Orchestrator state."""

    PREFLIGHT = "preflight"
    DEPLOYING = "deploying"
    COMPLETE = "complete"
    ABORTED = "aborted"


@dataclass(frozen=True)
class DeploymentResult:
    """Result of one network in a run."""

    network: str
    outcome: DeploymentOutcome
    address: Optional[str] = None  # Deployed or observed address
    code_hash: Optional[str] = None  # Observed code hash
    reason: Optional[str] = None  # Only for FAILED
    verification_instruction: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.outcome is DeploymentOutcome.SKIPPED_ALREADY_PRESENT

    @property
    def succeeded(self) -> bool:
        return self.outcome is not DeploymentOutcome.FAILED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "network": self.network,
            "outcome": self.outcome.value,
            "address": self.address,
            "code_hash": self.code_hash,
            "skipped": self.skipped,
            "reason": self.reason,
            "verification_instruction": self.verification_instruction,
        }


@dataclass
class DeploymentReport:
    """
    Aggregated results of a run.

    Results are append-only: a network's result is never overwritten.
    """

    networks: Tuple[str, ...]  # Catalog order
    state: RunState = RunState.PREFLIGHT
    error: Optional[Exception] = None
    _results: Dict[str, DeploymentResult] = field(default_factory=dict, repr=False)

    def record(self, result: DeploymentResult) -> None:
        """
        Record a network's result.

        Raises:
            ReportConflictError: If the network already has a result
        """
        if result.network in self._results:
            raise ReportConflictError(
                f"Result for network '{result.network}' already recorded"
            )
        self._results[result.network] = result

    @property
    def results(self) -> List[DeploymentResult]:
        """Recorded results, in recording order."""
        return list(self._results.values())

    def result(self, network: str) -> Optional[DeploymentResult]:
        return self._results.get(network)

    @property
    def ok(self) -> bool:
        return self.state is RunState.COMPLETE and self.error is None

    @property
    def succeeded(self) -> List[str]:
        return [r.network for r in self._results.values() if r.succeeded]

    @property
    def pending(self) -> List[str]:
        """Networks that were never attempted."""
        return [n for n in self.networks if n not in self._results]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "ok": self.ok,
            "error": str(self.error) if self.error is not None else None,
            "error_type": type(self.error).__name__ if self.error is not None else None,
            "networks": list(self.networks),
            "succeeded": self.succeeded,
            "pending": self.pending,
            "results": [r.to_dict() for r in self._results.values()],
        }
