# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Derive the elapsed duration of a job from its timestamps."""

from datetime import datetime, timedelta
from typing import Optional


def job_duration(
    started_at: Optional[datetime], completed_at: Optional[datetime]
) -> Optional[timedelta]:
    """Calculate how long a job ran.

    A job which has not started, has not completed, or whose completion is not strictly after its
    start is not measurable. This is a normal state (e.g. a job cancelled before it was picked up
    by a runner), not an error.

    Args:
        started_at: The time the job started.
        completed_at: The time the job completed.

    Returns:
        The elapsed duration, or None if the job is not measurable.
    """
    if started_at is None or completed_at is None:
        return None
    if completed_at <= started_at:
        return None
    return completed_at - started_at
