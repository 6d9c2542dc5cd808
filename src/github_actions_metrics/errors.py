# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Errors used by the application."""
from __future__ import annotations


class ConfigurationError(Exception):
    """Represents an invalid or incomplete application configuration."""


class WebhookError(Exception):
    """Base class for all webhook delivery errors."""


class MalformedPayloadError(WebhookError):
    """Represents a webhook payload that cannot be parsed into the expected event."""


class InvalidSignatureError(WebhookError):
    """Represents a webhook delivery whose signature does not match the webhook secret."""


class PlatformClientError(Exception):
    """Base class for all github client errors."""


class PlatformApiError(PlatformClientError):
    """Represents an error when the GitHub API returns an error."""


class TokenError(PlatformClientError):
    """Represents an error when the token is invalid or has not enough permissions."""


class RepositoryNotFoundError(PlatformClientError):
    """Represents an error when the repository could not be found on GitHub."""
