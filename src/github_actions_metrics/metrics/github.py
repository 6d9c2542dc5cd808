#  Copyright 2025 Canonical Ltd.
#  See LICENSE file for licensing details.

"""Metrics on the usage of the GitHub API."""

from prometheus_client import Counter

from github_actions_metrics.metrics import labels

# Status code used for non-HTTP errors in metrics
STATUS_CODE_NOT_AVAILABLE = "n/a"

GITHUB_API_REQUESTS_TOTAL = Counter(
    name="github_api_requests_total",
    documentation="Total number of GitHub API requests by endpoint",
    labelnames=[labels.ENDPOINT],
)
GITHUB_API_ERRORS_TOTAL = Counter(
    name="github_api_errors_total",
    documentation="Total number of GitHub API errors by endpoint and status code",
    labelnames=[labels.ENDPOINT, labels.STATUS_CODE],
)
