"""Command line interface entry point."""

from __future__ import annotations

import sys

import click

from script_deployer.configuration import (
    DEFAULT_CONFIG_FILENAME,
    write_placeholder_configuration,
)
from script_deployer.deployment_run import (
    DeploymentRunError,
    DeploymentRunRequest,
    execute_deployment_run,
)
from script_deployer.logging_setup import configure_logging

_LOG_LEVEL_CHOICES = click.Choice(
    ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False
)


class CliError(Exception):
    """Custom CLI error."""


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="script-deployer")
def cli() -> None:
    """Dependency-ordered script deployment utility."""


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML deployment configuration template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a placeholder YAML deployment configuration with guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="plan")
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to the YAML deployment configuration",
)
def plan(config_path: str) -> None:
    """Print the order in which deployable scripts would be evaluated."""
    try:
        outcome = execute_deployment_run(
            DeploymentRunRequest(config_path=config_path, plan_only=True)
        )
    except DeploymentRunError as exc:
        raise CliError(str(exc)) from exc
    for position, script_key in enumerate(outcome.ordered_keys, start=1):
        click.echo(f"{position}. {script_key}")


@cli.command(name="deploy")
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to the YAML deployment configuration",
)
@click.option(
    "--report",
    "report_path",
    required=False,
    type=click.Path(path_type=str),
    help="Optional path of an .xlsx deployment report to write",
)
@click.option(
    "--log-level",
    "log_level",
    required=False,
    type=_LOG_LEVEL_CHOICES,
    help="Override logging.level from the configuration",
)
def deploy(config_path: str, report_path: str | None, log_level: str | None) -> None:
    """Deploy scripts to the configured target."""
    try:
        outcome = execute_deployment_run(
            DeploymentRunRequest(
                config_path=config_path,
                report_path=report_path,
                log_level=log_level.upper() if log_level else None,
            ),
            logging_configurator=configure_logging,
        )
    except DeploymentRunError as exc:
        raise CliError(str(exc)) from exc

    result = outcome.result
    if result is not None:
        for script_key, status in result.deploy_script_statuses.items():
            click.echo(f"{script_key}: {status.name}")
    if outcome.report_path is not None:
        click.echo(str(outcome.report_path))
    if result is not None and not result.is_success:
        raise CliError(f"Deployment failed: {result.error_message}")


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
