#  Copyright 2025 Canonical Ltd.
#  See LICENSE file for licensing details.

"""Test for the usage aggregation."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from github_actions_metrics.configuration.github import GitHubRepo
from github_actions_metrics.errors import ConfigurationError, PlatformApiError
from github_actions_metrics.github_client import GithubClient
from github_actions_metrics.pagination import NO_MORE_PAGES, Page
from github_actions_metrics.usage import (
    UsageReport,
    aggregate_usage,
    created_filter,
    format_report,
    resolve_repository,
)
from tests.unit.factories.github_factory import (
    JOB_STARTED_AT,
    OwnerFactory,
    RepositoryFactory,
    WorkflowJobFactory,
    WorkflowRunFactory,
)

NOW = datetime(2024, 3, 31, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(name="github_client")
def github_client_fixture() -> MagicMock:
    """A GithubClient mock owning the queried repository."""
    github_client = MagicMock(spec=GithubClient)
    github_client.get_repository.return_value = RepositoryFactory(
        name="repo", owner=OwnerFactory(login="user")
    )
    return github_client


def _job_taking(seconds: int):
    """Create a job which ran for the given duration.

    Args:
        seconds: The duration of the job.

    Returns:
        The job.
    """
    return WorkflowJobFactory(completed_at=JOB_STARTED_AT + timedelta(seconds=seconds))


def _not_measurable_job():
    """Create a job which was cancelled before it started.

    Returns:
        The job.
    """
    return WorkflowJobFactory(started_at=None, completed_at=None, conclusion="cancelled")


def test_aggregate_usage(github_client: MagicMock):
    """
    arrange: Two runs with two jobs each, taking 30s, nothing (cancelled), 60s and 90s.
    act: Call aggregate_usage.
    assert: Two runs and three jobs totalling 180s are reported.
    """
    first_run, second_run = WorkflowRunFactory.create_batch(2)
    jobs = {
        first_run.id: [_job_taking(30), _not_measurable_job()],
        second_run.id: [_job_taking(60), _job_taking(90)],
    }
    github_client.list_workflow_runs.return_value = Page(
        items=[first_run, second_run], next_page=NO_MORE_PAGES
    )
    github_client.list_workflow_jobs.side_effect = lambda path, run_id, page: Page(
        items=jobs[run_id], next_page=NO_MORE_PAGES
    )

    report = aggregate_usage(github_client, user="user", repository="repo", since=30, now=NOW)

    assert report == UsageReport(
        total_runs=2, total_jobs=3, total_usage_duration=timedelta(seconds=180)
    )
    assert report.total_usage_minutes == 3
    github_client.list_workflow_runs.assert_called_once_with(
        path=GitHubRepo(owner="user", repo="repo"), created=">=2024-03-01T12:00:00Z", page=1
    )


def test_aggregate_usage_paginates_runs_and_jobs(github_client: MagicMock):
    """
    arrange: Runs spread over two pages, the jobs of each run over two pages.
    act: Call aggregate_usage.
    assert: Every run and job of every page is counted.
    """
    runs = WorkflowRunFactory.create_batch(3)
    run_pages = {
        1: Page(items=runs[:2], next_page=2),
        2: Page(items=runs[2:], next_page=NO_MORE_PAGES),
    }
    github_client.list_workflow_runs.side_effect = lambda path, created, page: run_pages[page]
    github_client.list_workflow_jobs.side_effect = lambda path, run_id, page: Page(
        items=WorkflowJobFactory.create_batch(2), next_page=2 if page == 1 else NO_MORE_PAGES
    )

    report = aggregate_usage(github_client, user="user", repository="repo", now=NOW)

    assert report.total_runs == 3
    assert report.total_jobs == 12
    assert report.total_usage_duration == timedelta(minutes=12)
    assert github_client.list_workflow_jobs.call_count == 6


def test_aggregate_usage_run_without_jobs(github_client: MagicMock):
    """
    arrange: One run without jobs.
    act: Call aggregate_usage.
    assert: The run is counted, no job is counted.
    """
    github_client.list_workflow_runs.return_value = Page(
        items=[WorkflowRunFactory()], next_page=NO_MORE_PAGES
    )
    github_client.list_workflow_jobs.return_value = Page(items=[], next_page=NO_MORE_PAGES)

    report = aggregate_usage(github_client, user="user", repository="repo", now=NOW)

    assert report == UsageReport(total_runs=1, total_jobs=0, total_usage_duration=timedelta(0))


def test_aggregate_usage_no_runs(github_client: MagicMock):
    """
    arrange: No runs in the window.
    act: Call aggregate_usage.
    assert: An empty report is returned without listing jobs.
    """
    github_client.list_workflow_runs.return_value = Page(items=[], next_page=NO_MORE_PAGES)

    report = aggregate_usage(github_client, user="user", repository="repo", now=NOW)

    assert report == UsageReport()
    github_client.list_workflow_jobs.assert_not_called()


def test_aggregate_usage_run_listing_failure(github_client: MagicMock):
    """
    arrange: A run listing failing on its second page.
    act: Call aggregate_usage.
    assert: The error propagates and no jobs are listed.
    """
    github_client.list_workflow_runs.side_effect = [
        Page(items=WorkflowRunFactory.create_batch(100), next_page=2),
        PlatformApiError("second page failed"),
    ]

    with pytest.raises(PlatformApiError):
        aggregate_usage(github_client, user="user", repository="repo", now=NOW)
    github_client.list_workflow_jobs.assert_not_called()


def test_aggregate_usage_job_listing_failure(github_client: MagicMock):
    """
    arrange: A job listing failing for the second run.
    act: Call aggregate_usage.
    assert: The error propagates.
    """
    github_client.list_workflow_runs.return_value = Page(
        items=WorkflowRunFactory.create_batch(2), next_page=NO_MORE_PAGES
    )
    github_client.list_workflow_jobs.side_effect = [
        Page(items=[WorkflowJobFactory()], next_page=NO_MORE_PAGES),
        PlatformApiError("failed"),
    ]

    with pytest.raises(PlatformApiError):
        aggregate_usage(github_client, user="user", repository="repo", now=NOW)


def test_aggregate_usage_negative_window(github_client: MagicMock):
    """
    arrange: A negative window length.
    act: Call aggregate_usage.
    assert: ConfigurationError is raised before any API call.
    """
    with pytest.raises(ConfigurationError):
        aggregate_usage(github_client, user="user", repository="repo", since=-1, now=NOW)
    github_client.get_repository.assert_not_called()


def test_resolve_repository_other_owner(github_client: MagicMock):
    """
    arrange: A repository owned by an organization, queried with a member name.
    act: Call resolve_repository.
    assert: The organization is used as owner.
    """
    github_client.get_repository.return_value = RepositoryFactory(
        name="repo", owner=OwnerFactory(login="org")
    )

    path = resolve_repository(github_client, "member", "repo")

    assert path == GitHubRepo(owner="org", repo="repo")
    github_client.get_repository.assert_called_once_with(GitHubRepo(owner="member", repo="repo"))


def test_aggregate_usage_uses_real_owner(github_client: MagicMock):
    """
    arrange: A repository owned by an organization, queried with a member name.
    act: Call aggregate_usage.
    assert: The runs are listed under the organization.
    """
    github_client.get_repository.return_value = RepositoryFactory(
        name="repo", owner=OwnerFactory(login="org")
    )
    github_client.list_workflow_runs.return_value = Page(items=[], next_page=NO_MORE_PAGES)

    aggregate_usage(github_client, user="member", repository="repo", now=NOW)

    assert github_client.list_workflow_runs.call_args.kwargs["path"] == GitHubRepo(
        owner="org", repo="repo"
    )


def test_created_filter():
    """
    arrange: A window of 7 days ending at a time with a non-UTC offset.
    act: Call created_filter.
    assert: The lower bound is rendered in UTC.
    """
    now = datetime(2024, 1, 8, 2, 30, 0, tzinfo=timezone(timedelta(hours=2)))

    assert created_filter(7, now) == ">=2024-01-01T00:30:00Z"


def test_format_report():
    """
    arrange: A usage report of 90 minutes and 30 seconds.
    act: Call format_report.
    assert: Every total is rendered, the minutes are truncated.
    """
    report = UsageReport(
        total_runs=4, total_jobs=7, total_usage_duration=timedelta(minutes=90, seconds=30)
    )

    assert format_report(report) == (
        "Total runs: 4\n"
        "Total jobs: 7\n"
        "Total usage duration: 1:30:30\n"
        "Total usage minutes: 90"
    )
