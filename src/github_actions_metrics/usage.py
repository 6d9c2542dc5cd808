# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Aggregate the GitHub Actions usage of a repository over a trailing window."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

from github_actions_metrics.configuration.github import GitHubRepo
from github_actions_metrics.errors import ConfigurationError
from github_actions_metrics.github_client import GithubClient
from github_actions_metrics.pagination import collect_pages

logger = logging.getLogger(__name__)

DEFAULT_SINCE_DAYS = 30


@dataclass
class UsageReport:
    """Totals of the workflow runs of a repository.

    Attributes:
        total_runs: The number of workflow runs in the window.
        total_jobs: The number of jobs with a measurable duration.
        total_usage_duration: The sum of the durations of the measured jobs.
    """

    total_runs: int = 0
    total_jobs: int = 0
    total_usage_duration: timedelta = field(default_factory=timedelta)

    @property
    def total_usage_minutes(self) -> int:
        """Whole minutes of the total usage duration."""
        return int(self.total_usage_duration.total_seconds() // 60)


def resolve_repository(client: GithubClient, user: str, repository: str) -> GitHubRepo:
    """Get the path of a repository under its actual owner.

    A repository owned by an organization may be queried with the name of one of its members,
    the real owner is used for all further calls.

    Args:
        client: The GitHub API client.
        user: The user the repository is queried for.
        repository: The name of the repository.

    Returns:
        The repository path.
    """
    repo = client.get_repository(GitHubRepo(owner=user, repo=repository))
    if repo.owner.login != user:
        logger.info("Repository %s is owned by %s, not %s", repo.name, repo.owner.login, user)
    return GitHubRepo(owner=repo.owner.login, repo=repo.name)


def created_filter(since: int, now: datetime) -> str:
    """Build the filter selecting runs created within the trailing window.

    Args:
        since: The length of the window in days.
        now: The end of the window.

    Returns:
        The filter on the run creation date.
    """
    lower_bound = now - timedelta(days=since)
    return f">={lower_bound.astimezone(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')}"


def aggregate_usage(
    client: GithubClient,
    user: str,
    repository: str,
    since: int = DEFAULT_SINCE_DAYS,
    now: Optional[datetime] = None,
) -> UsageReport:
    """Sum the duration of every job of the workflow runs in the window.

    Any API failure aborts the aggregation: a total over part of the window would be misleading.

    Args:
        client: The GitHub API client.
        user: The user the repository is queried for.
        repository: The name of the repository.
        since: The length of the window in days.
        now: The end of the window, defaults to the current time.

    Raises:
        ConfigurationError: If the window length is negative.

    Returns:
        The usage totals.
    """
    if since < 0:
        raise ConfigurationError(f"The window must not be negative, got {since} days")
    if now is None:
        now = datetime.now(timezone.utc)

    path = resolve_repository(client, user, repository)
    created = created_filter(since, now)
    runs = collect_pages(
        lambda page: client.list_workflow_runs(path=path, created=created, page=page)
    )
    logger.info("Fetched %s workflow runs of %s created %s", len(runs), path.path(), created)

    report = UsageReport(total_runs=len(runs))
    for run in runs:
        jobs = collect_pages(
            lambda page, run_id=run.id: client.list_workflow_jobs(
                path=path, run_id=run_id, page=page
            )
        )
        logger.info("Fetched %s jobs of workflow run %s", len(jobs), run.id)
        for job in jobs:
            duration = job.duration()
            if duration is None:
                continue
            report.total_jobs += 1
            report.total_usage_duration += duration
    return report


def format_report(report: UsageReport) -> str:
    """Render the usage totals as text.

    Args:
        report: The usage totals.

    Returns:
        One line per total.
    """
    return "\n".join(
        (
            f"Total runs: {report.total_runs}",
            f"Total jobs: {report.total_jobs}",
            f"Total usage duration: {report.total_usage_duration}",
            f"Total usage minutes: {report.total_usage_minutes}",
        )
    )
