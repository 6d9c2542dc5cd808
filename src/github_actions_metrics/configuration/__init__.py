# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Package containing the application configuration."""

from .base import ApplicationConfiguration, MetricsConfig, ServerConfig  # noqa: F401
from .github import GitHubConfiguration, GitHubRepo  # noqa: F401
