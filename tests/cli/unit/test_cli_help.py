"""CLI smoke tests."""

from click.testing import CliRunner
from script_deployer.cli import cli


def test_cli_displays_help() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "generate-config" in result.output
    assert "plan" in result.output
    assert "deploy" in result.output


def test_deploy_help_lists_options() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["deploy", "-h"])

    assert result.exit_code == 0
    assert "--config" in result.output
    assert "--report" in result.output
    assert "--log-level" in result.output
