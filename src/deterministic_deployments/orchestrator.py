"""Two-phase cross-network deployment for deterministic-deployments library."""

import logging
import threading
from typing import Optional

from .constants import DETERMINISTIC_FACTORY_ADDRESS
from .dependencies import preflight
from .deployer import deploy
from .environment import RemoteEnvironment
from .exceptions import (
    DeployFailedError,
    DeploymentError,
    RunCancelledError,
    UnexpectedDeployedAddressError,
    UnexpectedDeployedCodeHashError,
)
from .networks import NetworkCatalog
from .report import verification_instruction
from .types import (
    Action,
    DeploymentOutcome,
    DeploymentReport,
    DeploymentRequest,
    DeploymentResult,
    RunState,
)
from .verifier import decide_action, verify_outcome

logger = logging.getLogger(__name__)


class DeploymentOrchestrator:
    """
    Deploys one request to every network of a catalog.

    Phase 1 (preflight) checks the factory and all dependencies on every
    network, without side effects. Phase 2 runs only if phase 1 passed
    everywhere, deploying or skipping network by network in catalog order.
    Any failure stops the run; networks already done stay recorded.
    """

    def __init__(
        self,
        env: RemoteEnvironment,
        catalog: NetworkCatalog,
        factory_address: str = DETERMINISTIC_FACTORY_ADDRESS,
        preflight_workers: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            env: Remote environment for all networks in the catalog
            catalog: Target networks, in run order
            factory_address: Deterministic factory address
            preflight_workers: Parallel preflight workers (None for sequential)
            cancel_event: When set, the run stops before the next network
        """
        self._env = env
        self._catalog = catalog
        self._factory_address = factory_address
        self._preflight_workers = preflight_workers
        self._cancel_event = cancel_event

    def _check_cancelled(self, network: str) -> None:
        if self._cancel_event is not None and self._cancel_event.is_set():
            raise RunCancelledError(network)

    def preflight(self, request: DeploymentRequest) -> None:
        """
        Run phase 1 on every network.

        Raises:
            MissingDependencyError: First network (in catalog order) with a missing address
            RunCancelledError: If cancelled
        """
        networks = self._catalog.list()
        logger.info(
            "Preflight on %d network(s): factory %s, %d dependencies",
            len(networks),
            self._factory_address,
            len(request.dependencies),
        )
        if self._preflight_workers and self._preflight_workers > 1:
            if networks:
                self._check_cancelled(networks[0])
            preflight(
                self._env,
                networks,
                self._factory_address,
                request.dependencies,
                max_workers=self._preflight_workers,
            )
            return

        for network in networks:
            self._check_cancelled(network)
            preflight(self._env, [network], self._factory_address, request.dependencies)

    def _deploy_network(self, network: str, request: DeploymentRequest) -> DeploymentResult:
        with self._env.activate(network) as context:
            logger.info("Deploying on %s as %s", network, context.sender)

            action = decide_action(
                request.expected_address, context.has_code(request.expected_address)
            )
            if action is Action.SKIP_ALREADY_PRESENT:
                logger.info("Code already present at %s on %s, skipping deploy", request.expected_address, network)
                deployed_address = request.expected_address
                outcome = DeploymentOutcome.SKIPPED_ALREADY_PRESENT
            else:
                deployed_address = deploy(
                    context,
                    request.code,
                    salt=request.salt,
                    factory_address=self._factory_address,
                )
                outcome = DeploymentOutcome.DEPLOYED

            code_hash = context.code_hash(deployed_address)
            verify_outcome(
                deployed_address,
                request.expected_address,
                code_hash,
                request.expected_code_hash,
                network=network,
            )

        return DeploymentResult(
            network=network,
            outcome=outcome,
            address=deployed_address,
            code_hash=code_hash,
            verification_instruction=verification_instruction(
                network, deployed_address, request.verification_label
            ),
        )

    def _failed_result(self, network: str, error: Exception, request: DeploymentRequest) -> DeploymentResult:
        """Build a FAILED result carrying whatever the error observed on chain."""
        address = None
        code_hash = None
        if isinstance(error, UnexpectedDeployedAddressError):
            address = error.actual
        elif isinstance(error, UnexpectedDeployedCodeHashError):
            # Address check passed before the hash check
            address = request.expected_address
            code_hash = error.actual
        elif isinstance(error, DeployFailedError):
            address = error.address
        return DeploymentResult(
            network=network,
            outcome=DeploymentOutcome.FAILED,
            address=address,
            code_hash=code_hash,
            reason=str(error),
        )

    def run(self, request: DeploymentRequest) -> DeploymentReport:
        """
        Run both phases.

        Failures are returned in the report, never raised. Errors outside the
        DeploymentError hierarchy (a malformed node response, a bug in an
        environment) abort the run the same way, keeping results recorded so far.

        Args:
            request: Deployment to apply on every network

        Returns:
            DeploymentReport in state COMPLETE or ABORTED
        """
        report = DeploymentReport(networks=tuple(self._catalog.list()))

        try:
            self.preflight(request)
        except DeploymentError as e:
            logger.error("Preflight failed, no deployments attempted: %s", e)
            report.error = e
            report.state = RunState.ABORTED
            return report
        except Exception as e:
            logger.exception("Unexpected error in preflight, no deployments attempted")
            report.error = e
            report.state = RunState.ABORTED
            return report

        report.state = RunState.DEPLOYING
        for network in self._catalog.list():
            try:
                self._check_cancelled(network)
                result = self._deploy_network(network, request)
            except RunCancelledError as e:
                logger.error("Run cancelled before %s", network)
                self._abort(report, e)
                return report
            except DeploymentError as e:
                logger.error("Deployment on %s failed: %s", network, e)
                report.record(self._failed_result(network, e, request))
                self._abort(report, e)
                return report
            except Exception as e:
                logger.exception("Unexpected error deploying on %s", network)
                report.record(self._failed_result(network, e, request))
                self._abort(report, e)
                return report

            report.record(result)
            logger.info("Verify on %s: %s", network, result.verification_instruction)

        report.state = RunState.COMPLETE
        logger.info("Deployment complete on %d network(s) at %s", len(report.results), request.expected_address)
        return report

    @staticmethod
    def _abort(report: DeploymentReport, error: Exception) -> None:
        report.error = error
        report.state = RunState.ABORTED
        if report.succeeded:
            logger.error("Networks already done: %s", ", ".join(report.succeeded))
