"""Run report rendering for deterministic-deployments library."""

import json
from pathlib import Path
from typing import List, Union

from .types import DeploymentOutcome, DeploymentReport


def verification_instruction(network: str, address: str, label: str) -> str:
    """
    Build the manual bytecode-verification command for a deployment.

    Advisory only; nothing parses it.

    Args:
        network: Network name (used as the forge RPC alias)
        address: Deployed address
        label: Artifact identifier, e.g., "src/Counter.sol:Counter"

    Returns:
        Ready-to-run command line
    """
    return f"forge verify-bytecode --rpc-url {network} {address} {label}"


def format_report(report: DeploymentReport) -> List[str]:
    """
    Render a report as human-readable lines.

    Returns:
        One line per recorded network, then a summary line
    """
    lines = []
    for result in report.results:
        match result.outcome:
            case DeploymentOutcome.DEPLOYED:
                lines.append(f"{result.network}: deployed at {result.address} ({result.code_hash})")
            case DeploymentOutcome.SKIPPED_ALREADY_PRESENT:
                lines.append(f"{result.network}: already present at {result.address} ({result.code_hash})")
            case DeploymentOutcome.FAILED:
                lines.append(f"{result.network}: FAILED: {result.reason}")

    summary = f"{report.state.value}: succeeded [{', '.join(report.succeeded)}]"
    if report.pending:
        summary += f", pending [{', '.join(report.pending)}]"
    if report.error is not None:
        summary += f", error: {report.error}"
    lines.append(summary)
    return lines


def save_report(report: DeploymentReport, path: Union[Path, str]) -> Path:
    """
    Save a report as JSON.

    Creates parent directories if they don't exist.

    Returns:
        Path where the report was saved
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(report.to_dict(), f, indent=2)
    return path
