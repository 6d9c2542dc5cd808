# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""GitHub API client."""
import functools
import logging
from typing import Callable, ParamSpec, TypeVar
from urllib.error import HTTPError, URLError

# HTTP404NotFoundError is not found by pylint
from fastcore.net import HTTP404NotFoundError  # pylint: disable=no-name-in-module
from ghapi.all import GhApi
from prometheus_client import Counter
from pydantic import ValidationError
from requests import RequestException

from github_actions_metrics.configuration.github import DEFAULT_API_URL, GitHubRepo
from github_actions_metrics.errors import PlatformApiError, RepositoryNotFoundError, TokenError
from github_actions_metrics.metrics.github import (
    GITHUB_API_ERRORS_TOTAL,
    GITHUB_API_REQUESTS_TOTAL,
    STATUS_CODE_NOT_AVAILABLE,
)
from github_actions_metrics.pagination import NO_MORE_PAGES, Page
from github_actions_metrics.types_.github import Repository, WorkflowJob, WorkflowRun

logger = logging.getLogger(__name__)

# Maximum page size accepted by the GitHub REST API.
PER_PAGE = 100

# Parameters of the function decorated with catch_http_errors
ParamT = ParamSpec("ParamT")
# Return type of the function decorated with catch_http_errors
ReturnT = TypeVar("ReturnT")


def _increment_metric(metric: Counter, **labels: str) -> None:
    """Increment a GitHub API metric, logging instead of raising on failure.

    Args:
        metric: The Prometheus metric to increment.
        labels: The labels to apply to the metric.
    """
    try:
        metric.labels(**labels).inc()
    except Exception:  # pylint: disable=broad-except
        logger.exception("Failed to increment GitHub API metric %s", metric)


def catch_http_errors(func: Callable[ParamT, ReturnT]) -> Callable[ParamT, ReturnT]:
    """Catch HTTP errors and raise custom exceptions.

    Every call is counted in the GitHub API request metrics, failed calls also in the error
    metrics.

    Args:
        func: The target function to catch common errors for.

    Returns:
        The decorated function.
    """
    endpoint = func.__name__

    @functools.wraps(func)
    def wrapper(*args: ParamT.args, **kwargs: ParamT.kwargs) -> ReturnT:
        """Catch common errors when using the GitHub API.

        Args:
            args: Placeholder for positional arguments.
            kwargs: Placeholder for keyword arguments.

        Raises:
            TokenError: If there was an error with the provided token.
            PlatformApiError: If there was an unexpected error using the GitHub API or its
                response could not be parsed.

        Returns:
            The decorated function.
        """
        _increment_metric(GITHUB_API_REQUESTS_TOTAL, endpoint=endpoint)
        try:
            return func(*args, **kwargs)
        except HTTPError as exc:
            _increment_metric(
                GITHUB_API_ERRORS_TOTAL, endpoint=endpoint, status_code=str(exc.code)
            )
            if exc.code in (401, 403):
                if exc.code == 401:
                    msg = "Invalid token."
                else:
                    msg = "Provided token has not enough permissions or has reached rate-limit."
                raise TokenError(msg) from exc
            raise PlatformApiError(f"GitHub API call {endpoint} failed: {exc}") from exc
        except (URLError, RequestException) as exc:
            _increment_metric(
                GITHUB_API_ERRORS_TOTAL, endpoint=endpoint, status_code=STATUS_CODE_NOT_AVAILABLE
            )
            raise PlatformApiError(f"GitHub API call {endpoint} failed: {exc}") from exc
        except ValidationError as exc:
            _increment_metric(
                GITHUB_API_ERRORS_TOTAL, endpoint=endpoint, status_code=STATUS_CODE_NOT_AVAILABLE
            )
            raise PlatformApiError(
                f"GitHub API call {endpoint} returned an unexpected response: {exc}"
            ) from exc

    return wrapper


class GithubClient:
    """GitHub API client."""

    def __init__(self, token: str, api_url: str = DEFAULT_API_URL):
        """Instantiate the GiHub API client.

        Args:
            token: GitHub personal token for API requests.
            api_url: Base URL of the GitHub REST API.
        """
        self._token = token
        self._client = GhApi(token=self._token, gh_host=api_url.rstrip("/"))

    @catch_http_errors
    def get_repository(self, path: GitHubRepo) -> Repository:
        """Get the information of a repository.

        Args:
            path: GitHub repository path.

        Raises:
            RepositoryNotFoundError: If the repository does not exist or is not visible.

        Returns:
            The repository information.
        """
        try:
            raw_repo = self._client.repos.get(owner=path.owner, repo=path.repo)
        except HTTP404NotFoundError as err:
            raise RepositoryNotFoundError(f"Repository {path.path()} not found.") from err
        return Repository.model_validate(dict(raw_repo))

    @catch_http_errors
    def list_workflow_runs(self, path: GitHubRepo, created: str, page: int) -> Page[WorkflowRun]:
        """Get one page of the workflow runs of a repository.

        Args:
            path: GitHub repository path.
            created: Filter on the creation date of the runs, e.g. '>=2024-01-01'.
            page: The page number.

        Returns:
            The workflow runs on the page.
        """
        response = self._client.actions.list_workflow_runs_for_repo(
            owner=path.owner, repo=path.repo, created=created, per_page=PER_PAGE, page=page
        )
        runs = [WorkflowRun.model_validate(dict(run)) for run in response["workflow_runs"]]
        return Page(items=runs, next_page=self._next_page(page))

    @catch_http_errors
    def list_workflow_jobs(self, path: GitHubRepo, run_id: int, page: int) -> Page[WorkflowJob]:
        """Get one page of the jobs of a workflow run, including jobs of previous attempts.

        Args:
            path: GitHub repository path.
            run_id: The ID of the workflow run.
            page: The page number.

        Returns:
            The jobs on the page.
        """
        response = self._client.actions.list_jobs_for_workflow_run(
            owner=path.owner,
            repo=path.repo,
            run_id=run_id,
            filter="all",
            per_page=PER_PAGE,
            page=page,
        )
        jobs = [WorkflowJob.model_validate(dict(job)) for job in response["jobs"]]
        return Page(items=jobs, next_page=self._next_page(page))

    def _next_page(self, page: int) -> int:
        """Get the page following the most recent listing call.

        GitHub only sends a 'last' link on pages before the last one.

        Args:
            page: The page number of the most recent call.

        Returns:
            The next page number, NO_MORE_PAGES if the most recent page was the last.
        """
        last_page = self._client.last_page()
        if last_page > page:
            return page + 1
        return NO_MORE_PAGES
