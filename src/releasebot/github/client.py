"""GitHub REST client for labels and classic project boards."""

from __future__ import annotations

import asyncio
from functools import cached_property
from typing import TYPE_CHECKING, TypeVar

import structlog
from github import Auth, Github, GithubException

from releasebot.exceptions import RemoteAPIError

if TYPE_CHECKING:
    from collections.abc import Callable

    from github.Label import Label
    from github.Project import Project
    from github.ProjectCard import ProjectCard
    from github.ProjectColumn import ProjectColumn
    from github.Repository import Repository

    from releasebot.config import Settings

logger = structlog.get_logger()

T = TypeVar("T")

PER_PAGE = 100


class GitHubClient:
    """Async facade over PyGitHub (REST).

    PyGitHub is blocking, so every call runs in a worker thread.  One
    instance is created at startup and shared by every event handler; it
    holds no per-event state.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._token = settings.release_bot_github_token

    @cached_property
    def rest(self) -> Github:
        """PyGitHub client for REST API operations."""
        auth = Auth.Token(self._token) if self._token else None
        return Github(
            auth=auth,
            base_url=self._settings.release_bot_github_api_url,
            per_page=PER_PAGE,
            timeout=30,
        )

    def repo(self, owner: str, name: str) -> Repository:
        """Lazy repository handle; no request is made until it is used."""
        return self.rest.get_repo(f"{owner}/{name}", lazy=True)

    async def _call(self, operation: str, func: Callable[[], T]) -> T:
        try:
            return await asyncio.to_thread(func)
        except GithubException as exc:
            raise RemoteAPIError(operation, exc.status, str(exc.data)) from exc

    # -- labels ----------------------------------------------------------------

    async def list_labels(self, owner: str, repo: str) -> list[Label]:
        """All labels defined on the repository."""
        handle = self.repo(owner, repo)
        return await self._call("list labels", lambda: list(handle.get_labels()))

    async def list_issue_labels(self, owner: str, repo: str, number: int) -> list[Label]:
        """Labels currently applied to an issue."""
        handle = self.repo(owner, repo)
        return await self._call(
            f"list labels of issue #{number}",
            lambda: list(handle.get_issue(number).get_labels()),
        )

    async def add_labels(self, owner: str, repo: str, number: int, labels: list[str]) -> None:
        """Add labels to an issue in a single call."""
        handle = self.repo(owner, repo)
        await self._call(
            f"add labels to issue #{number}",
            lambda: handle.get_issue(number).add_to_labels(*labels),
        )

    # -- projects --------------------------------------------------------------

    async def list_projects(self, owner: str, repo: str, state: str = "open") -> list[Project]:
        """Projects of a repository, in the order the API returns them."""
        handle = self.repo(owner, repo)
        return await self._call("list projects", lambda: list(handle.get_projects(state=state)))

    async def list_columns(self, project: Project) -> list[ProjectColumn]:
        return await self._call(
            f"list columns of project '{project.name}'",
            lambda: list(project.get_columns()),
        )

    async def list_cards(self, column: ProjectColumn) -> list[ProjectCard]:
        return await self._call(
            f"list cards of column '{column.name}'",
            lambda: list(column.get_cards()),
        )

    async def create_card(self, column: ProjectColumn, content_id: int, content_type: str) -> ProjectCard:
        """Create a card linking an issue or pull request in a column."""
        return await self._call(
            f"create card in column '{column.name}'",
            lambda: column.create_card(content_id=content_id, content_type=content_type),
        )

    async def move_card(self, card: ProjectCard, column: ProjectColumn, position: str = "top") -> None:
        """Move a card to ``position`` within a column."""
        await self._call(
            f"move card to column '{column.name}'",
            lambda: card.move(position, column),
        )

    def close(self) -> None:
        """Clean up resources."""
        self.rest.close()
