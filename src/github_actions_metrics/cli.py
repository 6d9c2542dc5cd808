# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""The CLI entrypoints for the github-actions-metrics application."""

import importlib.metadata
import logging
import sys
from typing import TextIO

import click

from github_actions_metrics.configuration import ApplicationConfiguration
from github_actions_metrics.configuration.github import DEFAULT_API_URL
from github_actions_metrics.errors import ConfigurationError, PlatformClientError
from github_actions_metrics.github_client import GithubClient
from github_actions_metrics.http_server import FlaskArgs, start_http_server
from github_actions_metrics.metrics.job import PrometheusDurationStore
from github_actions_metrics.usage import DEFAULT_SINCE_DAYS, aggregate_usage, format_report
from github_actions_metrics.webhook import EventDispatcher, WorkflowJobHandler

version = importlib.metadata.version("github-actions-metrics")

LOG_LEVELS = ["CRITICAL", "FATAL", "ERROR", "WARNING", "INFO", "DEBUG"]

log_level_option = click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS),
    default="INFO",
    help="The log level for the application.",
)


def _configure_logging(log_level: str) -> None:
    """Configure the logging of the process.

    Args:
        log_level: The log level.
    """
    logging.basicConfig(
        level=log_level,
        stream=sys.stderr,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )


@click.command()
@click.option(
    "--config-file",
    type=click.File(mode="r", encoding="utf-8"),
    required=True,
    help="The file path containing the configurations.",
)
@click.option(
    "--debug",
    is_flag=True,
    show_default=True,
    default=False,
    help="Debug mode for testing.",
)
@log_level_option
# The server loop is covered by the HTTP server tests.
def main(config_file: TextIO, debug: bool, log_level: str) -> None:  # pragma: no cover
    """Start the webhook receiver and the metrics endpoint.

    Args:
        config_file: The configuration file.
        debug: Whether to start the application in debug mode.
        log_level: The log level.

    Raises:
        ClickException: If the configuration is invalid.
    """
    _configure_logging(log_level)
    logging.info("Starting github-actions-metrics version: %s", version)

    try:
        config = ApplicationConfiguration.from_yaml_file(config_file)
    except ConfigurationError as err:
        raise click.ClickException(str(err)) from err

    store = PrometheusDurationStore(
        namespace=config.metrics.namespace, subsystem=config.metrics.subsystem
    )
    dispatcher = EventDispatcher(
        handlers=[WorkflowJobHandler(store)],
        webhook_secret=config.github.app.webhook_secret,
    )
    if config.github.app.webhook_secret is None:
        logging.warning("No webhook secret configured, signatures of deliveries are not checked")
    flask_args = FlaskArgs(host=config.server.address, port=config.server.port, debug=debug)
    start_http_server(dispatcher, flask_args)


@click.command()
@click.option(
    "--user",
    type=str,
    required=True,
    envvar="GITHUB_USER",
    help="The GitHub user the repository is queried for.",
)
@click.option(
    "--token",
    type=str,
    required=True,
    envvar="GITHUB_TOKEN",
    help="The GitHub token used for the API requests.",
)
@click.option(
    "--repository",
    type=str,
    required=True,
    envvar="GITHUB_REPOSITORY",
    help="The name of the repository.",
)
@click.option(
    "--since",
    type=click.IntRange(min=0),
    default=DEFAULT_SINCE_DAYS,
    show_default=True,
    help="The number of days to look back.",
)
@click.option(
    "--api-url",
    type=str,
    default=DEFAULT_API_URL,
    show_default=True,
    help="The base URL of the GitHub REST API.",
)
@log_level_option
def usage(  # pylint: disable=too-many-arguments, too-many-positional-arguments
    user: str,
    token: str,
    repository: str,
    since: int,
    api_url: str,
    log_level: str,
) -> None:
    """Report the total GitHub Actions usage of a repository.

    Args:
        user: The GitHub user the repository is queried for.
        token: The GitHub token.
        repository: The name of the repository.
        since: The number of days to look back.
        api_url: The base URL of the GitHub REST API.
        log_level: The log level.

    Raises:
        ClickException: If the GitHub API could not be queried.
    """
    _configure_logging(log_level)
    client = GithubClient(token=token, api_url=api_url)
    try:
        report = aggregate_usage(client, user=user, repository=repository, since=since)
    except PlatformClientError as err:
        raise click.ClickException(f"Failed to aggregate usage: {err}") from err
    click.echo(format_report(report))
