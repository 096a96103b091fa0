import logging

import pytest
from click.testing import CliRunner

import fusiondeployer.cli as cli_module

CI_VARIABLES = ("GITHUB_ACTIONS", "TF_BUILD", "GITLAB_CI", "RUNNER_DEBUG")


@pytest.fixture(autouse=True)
def restore_logging(monkeypatch):
    for name in CI_VARIABLES:
        monkeypatch.delenv(name, raising=False)

    root = logging.getLogger()
    package_logger = logging.getLogger("fusiondeployer")
    saved = (list(root.handlers), root.level, list(package_logger.handlers), package_logger.level)
    yield
    root.handlers, root.level = saved[0], saved[1]
    package_logger.handlers, package_logger.level = saved[2], saved[3]


@pytest.fixture
def captured(monkeypatch):
    captured = {}

    class FakeOrchestrator:
        def __init__(self, run_context, report=None):
            captured["run_context"] = run_context
            captured["report"] = report

        def run(self):
            return captured.get("exit_code", 0)

    monkeypatch.setattr(cli_module, "DeploymentOrchestrator", FakeOrchestrator)
    return captured


def test_cli_uses_config_and_allows_cli_override(tmp_path, captured):
    config_file = tmp_path / ".fusiondeploy.yml"
    config_file.write_text(
        "api_hostname: api.sandbox.myorg.arcpublishing.com\n"
        "org_id: myorg\n"
        "api_key: secret\n"
        "retry_count: 3\n"
        "minimum_running_versions: 4\n",
        encoding="utf-8",
    )

    runner = CliRunner()
    result = runner.invoke(
        cli_module.main,
        [
            "--config",
            str(config_file),
            "--provider",
            "local",
            "--retry-count",
            "5",
            "--deploy",
            "--no-promote",
        ],
    )

    assert result.exit_code == 0, result.output
    run_context = captured["run_context"]
    assert run_context.retry_count == 5
    assert run_context.minimum_running_versions == 4
    assert run_context.org_id == "myorg"
    assert run_context.api_key == "secret"
    assert run_context.should_deploy is True
    assert run_context.should_promote is False


def test_cli_uses_default_config_file_when_present(tmp_path, monkeypatch, captured):
    default_config = tmp_path / ".fusiondeploy.yml"
    default_config.write_text(
        "org_id: default-org\n" "artifact: build/site.zip\n",
        encoding="utf-8",
    )
    monkeypatch.chdir(tmp_path)

    runner = CliRunner()
    result = runner.invoke(cli_module.main, ["--provider", "local"])

    assert result.exit_code == 0, result.output
    assert captured["run_context"].org_id == "default-org"
    assert captured["run_context"].artifact == "build/site.zip"


def test_cli_rejects_unknown_config_keys(tmp_path, captured):
    config_file = tmp_path / "deploy.yml"
    config_file.write_text("region: us-east-1\n", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(cli_module.main, ["--config", str(config_file)])

    assert result.exit_code != 0
    assert "Unknown configuration keys: region" in result.output
    assert "run_context" not in captured


def test_cli_reads_github_inputs_from_environment(tmp_path, monkeypatch, captured):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GITHUB_ACTIONS", "true")
    monkeypatch.setenv("INPUT_ORG-ID", "gh-org")
    monkeypatch.setenv("INPUT_DEPLOY", "true")
    monkeypatch.setenv("INPUT_TERMINATE-RETRY-COUNT", "6")
    monkeypatch.setenv("GITHUB_REF_NAME", "main")
    monkeypatch.setenv("GITHUB_SHA", "abc123")

    runner = CliRunner()
    result = runner.invoke(cli_module.main, [])

    assert result.exit_code == 0, result.output
    run_context = captured["run_context"]
    assert run_context.org_id == "gh-org"
    assert run_context.should_deploy is True
    assert run_context.terminate_retry_count == 6
    assert run_context.bundle_name.endswith("-main-abc123")


def test_cli_warns_when_ci_environment_is_unknown(tmp_path, monkeypatch, captured):
    monkeypatch.chdir(tmp_path)

    runner = CliRunner()
    result = runner.invoke(cli_module.main, [])

    assert result.exit_code == 0, result.output
    assert "Unsupported CI environment" in result.output


def test_cli_exit_code_reflects_failed_run(tmp_path, monkeypatch, captured):
    monkeypatch.chdir(tmp_path)
    captured["exit_code"] = 1

    runner = CliRunner()
    result = runner.invoke(cli_module.main, ["--provider", "gitlab"])

    assert result.exit_code == 1


def test_cli_passes_report_file_to_orchestrator(tmp_path, monkeypatch, captured):
    monkeypatch.chdir(tmp_path)
    report_file = tmp_path / "report.json"

    runner = CliRunner()
    result = runner.invoke(
        cli_module.main,
        ["--provider", "local", "--report-file", str(report_file)],
    )

    assert result.exit_code == 0, result.output
    assert captured["report"].report_file == str(report_file)


def test_cli_replaces_log_file_handler_between_runs(tmp_path, monkeypatch, captured):
    monkeypatch.chdir(tmp_path)
    log_file = tmp_path / "deploy.log"

    runner = CliRunner()
    for _ in range(2):
        result = runner.invoke(cli_module.main, ["--log-file", str(log_file)])
        assert result.exit_code == 0, result.output

    package_logger = logging.getLogger("fusiondeployer")
    file_handlers = [h for h in package_logger.handlers if isinstance(h, logging.FileHandler)]
    assert len(file_handlers) == 1
    file_handlers[0].flush()
    assert log_file.read_text(encoding="utf-8").count("Unsupported CI environment") == 2
    file_handlers[0].close()
