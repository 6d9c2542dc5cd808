#  Copyright 2025 Canonical Ltd.
#  See LICENSE file for licensing details.

"""Unit test setups and configurations."""

import pytest
from prometheus_client import CollectorRegistry

from github_actions_metrics.metrics.job import PrometheusDurationStore


@pytest.fixture(name="registry", scope="function")
def registry_fixture() -> CollectorRegistry:
    """A registry private to the test, so gauges can be registered once per test."""
    return CollectorRegistry()


@pytest.fixture(name="store", scope="function")
def store_fixture(registry: CollectorRegistry) -> PrometheusDurationStore:
    """A job duration store exporting to the private registry."""
    return PrometheusDurationStore(registry=registry)
