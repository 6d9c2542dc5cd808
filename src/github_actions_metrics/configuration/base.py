# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Base configuration for the Application."""

import logging
from typing import TextIO

import yaml
from pydantic import BaseModel, Field, ValidationError

from github_actions_metrics.configuration.github import GitHubConfiguration
from github_actions_metrics.errors import ConfigurationError
from github_actions_metrics.metrics.job import DEFAULT_NAMESPACE, DEFAULT_SUBSYSTEM

logger = logging.getLogger(__name__)


class ServerConfig(BaseModel):
    """Configuration of the HTTP server.

    Attributes:
        address: The address to listen on.
        port: The port to listen on.
    """

    address: str = "127.0.0.1"
    port: int = Field(default=8080, ge=0, le=65535)


class MetricsConfig(BaseModel):
    """Configuration of the exported metrics.

    Attributes:
        namespace: The namespace of the job duration gauge.
        subsystem: The subsystem of the job duration gauge.
    """

    namespace: str = DEFAULT_NAMESPACE
    subsystem: str = DEFAULT_SUBSYSTEM


class ApplicationConfiguration(BaseModel):
    """Main entry point for the Application Configuration.

    Attributes:
        server: Configuration of the HTTP server.
        github: GitHub configuration.
        metrics: Configuration of the exported metrics.
    """

    server: ServerConfig = Field(default_factory=ServerConfig)
    github: GitHubConfiguration = Field(default_factory=GitHubConfiguration)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)

    @staticmethod
    def from_yaml_file(file: TextIO) -> "ApplicationConfiguration":
        """Initialize configuration from a YAML formatted file.

        Args:
            file: The file object to parse the configuration from.

        Raises:
            ConfigurationError: If the file is not valid YAML or does not match the schema.

        Returns:
            The configuration.
        """
        try:
            config = yaml.safe_load(file)
        except yaml.YAMLError as exc:
            raise ConfigurationError("Configuration file is not valid YAML") from exc
        if config is None:
            logger.warning("Empty configuration file, using the defaults")
            config = {}
        try:
            return ApplicationConfiguration.model_validate(config)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc
