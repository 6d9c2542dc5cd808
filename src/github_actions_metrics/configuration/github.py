# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Module containing GitHub Configuration."""

from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_API_URL = "https://api.github.com"


class GitHubAppConfiguration(BaseModel):
    """GitHub App settings used by the webhook receiver.

    Attributes:
        webhook_secret: Secret used to sign webhook deliveries. Signatures are not verified if
            unset.
    """

    webhook_secret: Optional[str] = None


class GitHubConfiguration(BaseModel):
    """GitHub configuration for the application.

    Attributes:
       app: GitHub App settings.
    """

    app: GitHubAppConfiguration = Field(default_factory=GitHubAppConfiguration)


class GitHubRepo(BaseModel):
    """Represent GitHub repository.

    Attributes:
        owner: Owner of the GitHub repository.
        repo: Name of the GitHub repository.
    """

    owner: str
    repo: str

    def path(self) -> str:
        """Return a string representing the path.

        Returns:
            Path to the GitHub entity.
        """
        return f"{self.owner}/{self.repo}"

