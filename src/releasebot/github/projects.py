"""Project board lookups: resolving a release to its board and locating cards."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from releasebot.exceptions import NoProjectFoundError

if TYPE_CHECKING:
    from github.Project import Project
    from github.ProjectCard import ProjectCard
    from github.ProjectColumn import ProjectColumn

    from releasebot.github.client import GitHubClient

logger = structlog.get_logger()


@dataclass
class BoardScan:
    """Where an issue's card sits on a board, and where it should go."""

    destination: ProjectColumn | None = None
    source: ProjectColumn | None = None
    card: ProjectCard | None = None


def find_project(projects: list[Project], prefix: str) -> Project:
    """Return the first open project whose name starts with ``prefix``.

    API order is authoritative; there is no further tie-break.
    """
    for project in projects:
        if project.state == "open" and project.name.startswith(prefix):
            return project
    raise NoProjectFoundError(prefix)


async def resolve_project(github: GitHubClient, owner: str, repo: str, prefix: str) -> Project:
    """Fetch the open projects of ``owner/repo`` and resolve ``prefix`` against them."""
    projects = await github.list_projects(owner, repo, state="open")
    project = find_project(projects, prefix)
    logger.debug("projects.resolved", prefix=prefix, project=project.name, project_id=project.id)
    return project


async def scan_board(
    github: GitHubClient,
    columns: list[ProjectColumn],
    target_name: str,
    issue_url: str,
) -> BoardScan:
    """Walk every column once, looking for ``target_name`` and the issue's card.

    If the issue somehow has cards in several columns, the last column
    scanned wins.
    """
    scan = BoardScan()
    for column in columns:
        if column.name == target_name:
            scan.destination = column
        for card in await github.list_cards(column):
            if card.content_url == issue_url:
                scan.source = column
                scan.card = card
    return scan
