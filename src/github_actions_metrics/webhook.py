# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Handling of GitHub webhook deliveries."""

import abc
import hashlib
import hmac
import logging
from typing import Iterable, Optional

from pydantic import ValidationError

from github_actions_metrics.errors import InvalidSignatureError, MalformedPayloadError
from github_actions_metrics.metrics.job import DurationStore, JobDurationKey
from github_actions_metrics.types_.github import WorkflowJobAction, WorkflowJobEvent

logger = logging.getLogger(__name__)

WORKFLOW_JOB_EVENT = "workflow_job"

EVENT_TYPE_HEADER = "X-GitHub-Event"
DELIVERY_ID_HEADER = "X-GitHub-Delivery"
SIGNATURE_HEADER = "X-Hub-Signature-256"
SIGNATURE_PREFIX = "sha256="


class EventHandler(abc.ABC):
    """Base class for handlers of webhook events."""

    @abc.abstractmethod
    def handles(self) -> list[str]:
        """Get the event types handled.

        Returns:
            The names of the event types, e.g. 'workflow_job'.
        """

    @abc.abstractmethod
    def handle(self, event_type: str, delivery_id: str, payload: bytes) -> None:
        """Handle a single webhook delivery.

        Args:
            event_type: The event type of the delivery.
            delivery_id: The unique ID of the delivery.
            payload: The raw JSON body of the delivery.
        """


class WorkflowJobHandler(EventHandler):
    """Record the duration of completed workflow jobs."""

    def __init__(self, store: DurationStore):
        """Construct the handler.

        Args:
            store: The storage of job durations.
        """
        self._store = store

    def handles(self) -> list[str]:
        """Get the event types handled.

        Returns:
            The workflow_job event type.
        """
        return [WORKFLOW_JOB_EVENT]

    def handle(self, event_type: str, delivery_id: str, payload: bytes) -> None:
        """Set the duration gauge of a job once it completes.

        Events for jobs which are not completed, and completed jobs without a measurable duration
        (e.g. cancelled before starting), are ignored.

        Args:
            event_type: The event type of the delivery.
            delivery_id: The unique ID of the delivery.
            payload: The raw JSON body of the delivery.

        Raises:
            MalformedPayloadError: If the payload is not a workflow_job event.
        """
        logger.debug("Got event %s, delivery %s", event_type, delivery_id)
        try:
            event = WorkflowJobEvent.model_validate_json(payload)
        except ValidationError as exc:
            raise MalformedPayloadError("failed to parse workflow_job event") from exc

        logger.debug("Event action is %s", event.action)
        if event.action != WorkflowJobAction.COMPLETED:
            return

        job = event.workflow_job
        duration = job.duration()
        if duration is None:
            logger.debug(
                "Job %s completed without a measurable duration (started %s, completed %s)",
                job.id,
                job.started_at,
                job.completed_at,
            )
            return

        key = JobDurationKey(
            job_id=job.id,
            workflow_name=job.workflow_name or "",
            job_name=job.name,
            conclusion=job.conclusion or "",
        )
        self._store.set(key, duration.total_seconds())
        logger.info(
            "Job %s (%s/%s) completed with %s in %ss",
            key.job_id,
            key.workflow_name,
            key.job_name,
            key.conclusion,
            duration.total_seconds(),
        )


class EventDispatcher:
    """Route verified webhook deliveries to the handler of their event type."""

    def __init__(self, handlers: Iterable[EventHandler], webhook_secret: Optional[str] = None):
        """Construct the dispatcher.

        Args:
            handlers: The event handlers.
            webhook_secret: The secret deliveries are signed with. Signatures are not checked if
                None.

        Raises:
            ValueError: If two handlers handle the same event type.
        """
        self._webhook_secret = webhook_secret
        self._handlers: dict[str, EventHandler] = {}
        for handler in handlers:
            for event_type in handler.handles():
                if event_type in self._handlers:
                    raise ValueError(f"Multiple handlers for event type {event_type}")
                self._handlers[event_type] = handler

    def verify_signature(self, payload: bytes, signature: Optional[str]) -> None:
        """Check the payload was signed with the webhook secret.

        Args:
            payload: The raw body of the delivery.
            signature: The value of the signature header.

        Raises:
            InvalidSignatureError: If the signature is missing or does not match.
        """
        if self._webhook_secret is None:
            return
        if not signature or not signature.startswith(SIGNATURE_PREFIX):
            raise InvalidSignatureError("Missing or malformed webhook signature")
        expected = hmac.new(
            self._webhook_secret.encode("utf-8"), payload, hashlib.sha256
        ).hexdigest()
        if not hmac.compare_digest(expected, signature[len(SIGNATURE_PREFIX) :]):
            raise InvalidSignatureError("Webhook signature does not match")

    def dispatch(
        self,
        event_type: Optional[str],
        delivery_id: Optional[str],
        payload: bytes,
        signature: Optional[str] = None,
    ) -> bool:
        """Verify a delivery and pass it to its handler.

        Args:
            event_type: The event type of the delivery.
            delivery_id: The unique ID of the delivery.
            payload: The raw body of the delivery.
            signature: The value of the signature header.

        Raises:
            MalformedPayloadError: If the event type is missing.

        Returns:
            Whether a handler handled the delivery.
        """
        self.verify_signature(payload, signature)
        if not event_type:
            raise MalformedPayloadError(f"Missing {EVENT_TYPE_HEADER} header")
        handler = self._handlers.get(event_type)
        if handler is None:
            logger.debug("No handler for event %s, delivery %s", event_type, delivery_id)
            return False
        handler.handle(event_type, delivery_id or "", payload)
        return True
