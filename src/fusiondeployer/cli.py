import logging
import os

import click

from .core import DeploymentOrchestrator
from .errors import DeployerError
from .providers import PROVIDERS, UNSUPPORTED_ENVIRONMENT_WARNING, create_provider
from .services.config_loader import ConfigLoader
from .services.report import ReportService

DEFAULT_CONFIG_FILE = ".fusiondeploy.yml"


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


def configure_logging(provider, verbose: bool, log_file=None) -> logging.Logger:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[provider.create_log_handler()],
        force=True,
    )
    logger = logging.getLogger("fusiondeployer")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler):
            logger.removeHandler(handler)
            handler.close()

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    return logger


@click.command()
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help=f"Path to a YAML configuration file. Defaults to {DEFAULT_CONFIG_FILE} if present.",
)
@click.option(
    "--provider",
    "provider_name",
    type=click.Choice(["auto"] + sorted(PROVIDERS)),
    default="auto",
    show_default=True,
    help="CI provider used for inputs and log formatting.",
)
@click.option("--artifact", required=False, help="Path to the bundle zip to upload.")
@click.option(
    "--api-hostname",
    required=False,
    help="Deployment API hostname, e.g. api.sandbox.myorg.arcpublishing.com",
)
@click.option("--org-id", required=False, help="Organization identifier.")
@click.option("--bundle-prefix", required=False, help="Prefix for the generated bundle name.")
@click.option("--pagebuilder-version", required=False, help="Page builder version to deploy with.")
@click.option(
    "--retry-count",
    type=int,
    default=None,
    help="Number of retries while waiting for the new version to appear.",
)
@click.option(
    "--retry-delay",
    type=int,
    default=None,
    help="Seconds between version polls.",
)
@click.option(
    "--minimum-running-versions",
    type=int,
    default=None,
    help="Do not terminate the oldest version unless more than this many are running.",
)
@click.option(
    "--terminate-retry-count",
    type=int,
    default=None,
    help="Attempts to terminate the oldest version.",
)
@click.option(
    "--terminate-retry-delay",
    type=int,
    default=None,
    help="Seconds between termination attempts.",
)
@click.option("--deploy/--no-deploy", default=None, help="Deploy the uploaded bundle.")
@click.option("--promote/--no-promote", default=None, help="Promote the new version.")
@click.option(
    "--request-timeout",
    type=float,
    default=None,
    help="HTTP timeout in seconds for each API request.",
)
@click.option("--report-file", type=click.Path(), help="Write a JSON run report to this path.")
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
def main(
    config,
    provider_name,
    artifact,
    api_hostname,
    org_id,
    bundle_prefix,
    pagebuilder_version,
    retry_count,
    retry_delay,
    minimum_running_versions,
    terminate_retry_count,
    terminate_retry_delay,
    deploy,
    promote,
    request_timeout,
    report_file,
    verbose,
    log_file,
):
    """Upload, deploy and promote a page builder bundle from CI."""
    try:
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = ConfigLoader().load(resolved_config)
    except DeployerError as exc:
        raise click.ClickException(str(exc)) from exc

    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    log_file = _resolve_option(log_file, config_values, "log_file")
    report_file = _resolve_option(report_file, config_values, "report_file")

    provider = create_provider(provider_name)
    logger = configure_logging(provider, verbose or provider.debug_enabled(), log_file)
    if not provider.detected:
        provider.warning(UNSUPPORTED_ENVIRONMENT_WARNING)

    options = {
        "artifact": artifact,
        "api_hostname": api_hostname,
        "org_id": org_id,
        "bundle_prefix": bundle_prefix,
        "pagebuilder_version": pagebuilder_version,
        "retry_count": retry_count,
        "retry_delay": retry_delay,
        "minimum_running_versions": minimum_running_versions,
        "terminate_retry_count": terminate_retry_count,
        "terminate_retry_delay": terminate_retry_delay,
        "deploy": deploy,
        "promote": promote,
        "request_timeout": request_timeout,
    }
    run_context = provider.create_run_context(options=options, defaults=config_values)

    orchestrator = DeploymentOrchestrator(
        run_context,
        report=ReportService(report_file=report_file, logger=logger),
    )
    exit_code = orchestrator.run()
    if provider.failed:
        exit_code = 1

    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
