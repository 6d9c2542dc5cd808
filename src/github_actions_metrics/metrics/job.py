#  Copyright 2025 Canonical Ltd.
#  See LICENSE file for licensing details.

"""Storage of the job duration gauge."""

import abc
from typing import NamedTuple

from prometheus_client import REGISTRY, CollectorRegistry, Gauge

from github_actions_metrics.metrics import labels

DEFAULT_NAMESPACE = "hf"
DEFAULT_SUBSYSTEM = "github_actions"
JOB_DURATION_NAME = "job_duration"


class JobDurationKey(NamedTuple):
    """Identity of a job duration series.

    The job id makes the series per execution rather than per job definition.

    Attributes:
        job_id: The ID of the job.
        workflow_name: The name of the workflow.
        job_name: The name of the job.
        conclusion: The end result of the job, empty if GitHub did not report one.
    """

    job_id: int
    workflow_name: str
    job_name: str
    conclusion: str


class DurationStore(abc.ABC):
    """Thread-safe storage of the latest duration per job."""

    @abc.abstractmethod
    def set(self, key: JobDurationKey, seconds: float) -> None:
        """Set the duration of a series, overwriting any previous value.

        Args:
            key: The series to set.
            seconds: The duration in seconds.
        """

    @abc.abstractmethod
    def snapshot(self) -> list[tuple[JobDurationKey, float]]:
        """Get the current value of every series.

        Returns:
            The series and their values.
        """


class PrometheusDurationStore(DurationStore):
    """Job durations exported as a labelled Prometheus gauge.

    The gauge children are locked by prometheus_client, concurrent writers are safe and the last
    write wins.
    """

    def __init__(
        self,
        namespace: str = DEFAULT_NAMESPACE,
        subsystem: str = DEFAULT_SUBSYSTEM,
        registry: CollectorRegistry = REGISTRY,
    ):
        """Create the gauge and register it.

        Args:
            namespace: The metric namespace.
            subsystem: The metric subsystem.
            registry: The registry exposing the gauge.
        """
        self._gauge = Gauge(
            name=JOB_DURATION_NAME,
            documentation="Duration of completed GitHub Actions jobs (seconds)",
            labelnames=[labels.JOB_ID, labels.WORKFLOW_NAME, labels.JOB_NAME, labels.CONCLUSION],
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )

    def set(self, key: JobDurationKey, seconds: float) -> None:
        """Set the gauge of a job.

        Args:
            key: The series to set.
            seconds: The duration in seconds.
        """
        self._gauge.labels(
            **{
                labels.JOB_ID: str(key.job_id),
                labels.WORKFLOW_NAME: key.workflow_name,
                labels.JOB_NAME: key.job_name,
                labels.CONCLUSION: key.conclusion,
            }
        ).set(seconds)

    def snapshot(self) -> list[tuple[JobDurationKey, float]]:
        """Get the current value of every job gauge.

        Returns:
            The series and their values.
        """
        series = []
        for metric in self._gauge.collect():
            for sample in metric.samples:
                key = JobDurationKey(
                    job_id=int(sample.labels[labels.JOB_ID]),
                    workflow_name=sample.labels[labels.WORKFLOW_NAME],
                    job_name=sample.labels[labels.JOB_NAME],
                    conclusion=sample.labels[labels.CONCLUSION],
                )
                series.append((key, sample.value))
        return series
