"""Webhook payloads used by release-bot.

Everything here is parsed fresh from a webhook body for each event; nothing
is cached or persisted.  API resources (projects, columns, cards) are the
PyGitHub objects returned by the client.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field


class _GitHubModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class Label(_GitHubModel):
    name: str


class Owner(_GitHubModel):
    login: str


class Repository(_GitHubModel):
    name: str
    owner: Owner


class PullRequestLinks(_GitHubModel):
    url: str | None = None


class Issue(_GitHubModel):
    id: int
    number: int
    url: str
    html_url: str = ""
    labels: list[Label] = Field(default_factory=list)
    pull_request: PullRequestLinks | None = None

    @property
    def is_pull_request(self) -> bool:
        return self.pull_request is not None


class IssuesEvent(_GitHubModel):
    """Payload of an ``issues`` webhook delivery."""

    action: str
    issue: Issue
    repository: Repository
    label: Label | None = None

    @property
    def owner(self) -> str:
        return self.repository.owner.login

    @property
    def repo(self) -> str:
        return self.repository.name


class ColumnAction(enum.StrEnum):
    """Outcome of reconciling a card against a label."""

    SKIPPED = "skipped"
    CREATED = "created"
    MOVED = "moved"
