"""Integration tests for the deterministic-deploy command line."""

import json
from pathlib import Path

import pytest
from conftest import DEPENDENCY_A, DEPENDENCY_B, EXPECTED_ADDRESS, FakeEnvironment

from deterministic_deployments import cli
from deterministic_deployments.constants import DETERMINISTIC_FACTORY_ADDRESS, NETWORK_CONFIG

PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"


@pytest.fixture
def cli_env(monkeypatch) -> FakeEnvironment:
    """Configure RPC URLs and key, and route the CLI to a FakeEnvironment."""
    env = FakeEnvironment(["mainnet", "base"])
    for network in ["mainnet", "base"]:
        env.set_code(network, DETERMINISTIC_FACTORY_ADDRESS)
        env.set_code(network, DEPENDENCY_A)
        env.set_code(network, DEPENDENCY_B)
        monkeypatch.setenv(NETWORK_CONFIG[network]["default_rpc_env"], f"http://{network}.example.com")
    monkeypatch.setenv("DEPLOYER_PRIVATE_KEY", PRIVATE_KEY)
    monkeypatch.setattr(cli, "JsonRpcEnvironment", lambda catalog, account, timeout: env)
    return env


class TestMain:
    """Test exit codes and outputs of main()."""

    def test_successful_run(self, cli_env: FakeEnvironment, manifest_file: Path, tmp_path: Path, capsys):
        report_path = tmp_path / "report.json"

        exit_code = cli.main([str(manifest_file), "--report", str(report_path)])

        assert exit_code == 0
        assert cli_env.factory_deploys() == ["mainnet", "base"]

        with open(report_path) as f:
            report = json.load(f)
        assert report["state"] == "complete"
        assert [r["network"] for r in report["results"]] == ["mainnet", "base"]

        out_lines = capsys.readouterr().out.strip().splitlines()
        assert len(out_lines) == 2
        assert out_lines[0].startswith("forge verify-bytecode --rpc-url mainnet")
        assert EXPECTED_ADDRESS in out_lines[0].lower()

    def test_network_flags_override_manifest_order(
        self, cli_env: FakeEnvironment, manifest_file: Path, tmp_path: Path
    ):
        exit_code = cli.main(
            [str(manifest_file), "-n", "base", "-n", "mainnet", "--report", str(tmp_path / "r.json")]
        )

        assert exit_code == 0
        assert cli_env.factory_deploys() == ["base", "mainnet"]

    def test_failure_exit_code(self, cli_env: FakeEnvironment, manifest_file: Path, tmp_path: Path):
        del cli_env.code["base"][DEPENDENCY_B.lower()]
        report_path = tmp_path / "report.json"

        exit_code = cli.main([str(manifest_file), "--report", str(report_path)])

        assert exit_code == 1
        assert cli_env.broadcasts == []
        with open(report_path) as f:
            report = json.load(f)
        assert report["state"] == "aborted"
        assert report["error_type"] == "MissingDependencyError"

    def test_preflight_only_never_broadcasts(self, cli_env: FakeEnvironment, manifest_file: Path):
        assert cli.main([str(manifest_file), "--preflight-only"]) == 0
        assert cli_env.activations == []
        assert cli_env.broadcasts == []

    def test_preflight_only_failure(self, cli_env: FakeEnvironment, manifest_file: Path):
        cli_env.code["mainnet"].clear()

        assert cli.main([str(manifest_file), "--preflight-only"]) == 1

    def test_missing_private_key(self, cli_env: FakeEnvironment, manifest_file: Path, monkeypatch):
        monkeypatch.delenv("DEPLOYER_PRIVATE_KEY")

        assert cli.main([str(manifest_file)]) == 2
        assert cli_env.code_checks == []

    def test_missing_manifest(self, cli_env: FakeEnvironment, tmp_path: Path):
        assert cli.main([str(tmp_path / "missing.json")]) == 2

    def test_unknown_network(self, cli_env: FakeEnvironment, manifest_file: Path):
        assert cli.main([str(manifest_file), "-n", "atlantis"]) == 2

    def test_missing_rpc_url(self, cli_env: FakeEnvironment, manifest_file: Path, monkeypatch):
        monkeypatch.delenv(NETWORK_CONFIG["base"]["default_rpc_env"])

        assert cli.main([str(manifest_file)]) == 2

    def test_invalid_timeout_env(self, cli_env: FakeEnvironment, manifest_file: Path, monkeypatch):
        monkeypatch.setenv("DEPLOY_RPC_TIMEOUT", "soon")

        assert cli.main([str(manifest_file)]) == 2

    def test_default_report_location(
        self, cli_env: FakeEnvironment, manifest_file: Path, tmp_path: Path, monkeypatch
    ):
        workdir = tmp_path / "work"
        workdir.mkdir()
        monkeypatch.chdir(workdir)

        assert cli.main([str(manifest_file)]) == 0

        report_path = workdir / ".deployments" / "answer.report.json"
        with open(report_path) as f:
            assert json.load(f)["state"] == "complete"


class TestDefaultReportPath:
    """Test the default_report_path function."""

    def test_uses_manifest_stem(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        path = cli.default_report_path("manifests/answer.json")

        assert path == tmp_path / ".deployments" / "answer.report.json"
