# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Module containing GitHub API and webhook related types."""


from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from github_actions_metrics.duration import job_duration


class WorkflowJobAction(str, Enum):
    """Lifecycle phase carried by a workflow_job webhook event.

    Attributes:
        QUEUED: The job was queued.
        WAITING: The job is waiting on a deployment protection rule.
        IN_PROGRESS: The job was picked up by a runner.
        COMPLETED: The job finished.
    """

    QUEUED = "queued"
    WAITING = "waiting"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Owner(BaseModel):
    """Owner of a GitHub repository.

    Attributes:
        login: Login of the user or organization.
    """

    login: str


class Repository(BaseModel):
    """Information on a GitHub repository.

    Attributes:
        name: Name of the repository.
        full_name: Name of the repository in the '<owner>/<repo>' format.
        owner: Owner of the repository.
    """

    name: str
    full_name: str
    owner: Owner


class WorkflowJob(BaseModel):
    """A single job of a workflow run.

    Attributes:
        id: Unique identifier of the job.
        run_id: Identifier of the workflow run the job belongs to.
        workflow_name: Name of the workflow.
        name: Name of the job.
        status: The status of the job, e.g. queued or completed.
        conclusion: The end result of the job, e.g. success or failure. GitHub adds new values
            over time, so any string is accepted.
        started_at: The time the job started.
        completed_at: The time the job completed.
    """

    id: int
    run_id: Optional[int] = None
    workflow_name: Optional[str] = None
    name: str
    status: Optional[str] = None
    conclusion: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def duration(self) -> Optional[timedelta]:
        """Get how long the job ran.

        Returns:
            The elapsed duration of the job, or None if the job is not measurable.
        """
        return job_duration(self.started_at, self.completed_at)


class WorkflowJobEvent(BaseModel):
    """Payload of a workflow_job webhook event.

    Attributes:
        action: The lifecycle phase of the job, see WorkflowJobAction.
        workflow_job: The job the event is about.
    """

    action: str
    workflow_job: WorkflowJob


class WorkflowRun(BaseModel):
    """A single workflow run of a repository.

    Attributes:
        id: Unique identifier of the workflow run.
        name: Name of the workflow.
        repository: The repository the workflow run belongs to.
        run_started_at: The time the workflow run started.
        conclusion: The end result of the workflow run.
    """

    id: int
    name: Optional[str] = None
    repository: Optional[Repository] = None
    run_started_at: Optional[datetime] = None
    conclusion: Optional[str] = None
