"""Triage labelling for newly opened issues.

When an issue is opened it should automatically carry a ``{release}/triage``
label for every release that currently has an open project board.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from releasebot.exceptions import NoProjectFoundError
from releasebot.github.labels import is_triage_label, split_label
from releasebot.github.projects import find_project

if TYPE_CHECKING:
    from releasebot.github.client import GitHubClient
    from releasebot.models import IssuesEvent

logger = structlog.get_logger()


async def reconcile_opened(github: GitHubClient, event: IssuesEvent) -> list[str]:
    """Apply every missing triage label that has an open project.

    All reads happen before the single write, so a failed read leaves the
    issue untouched.  Running this twice on the same issue is a no-op the
    second time.

    Returns:
        The label names that were added (empty when nothing was needed).
    """
    owner, repo, number = event.owner, event.repo, event.issue.number

    repo_labels = await github.list_labels(owner, repo)
    applied = {label.name for label in await github.list_issue_labels(owner, repo, number)}
    projects = await github.list_projects(owner, repo, state="open")

    to_apply: list[str] = []
    for label in repo_labels:
        if not is_triage_label(label.name):
            continue
        prefix, _ = split_label(label.name)
        try:
            project = find_project(projects, prefix)
        except NoProjectFoundError:
            logger.debug("triage.no_open_project", label=label.name, issue_number=number)
            continue
        if label.name in applied:
            logger.debug("triage.already_applied", label=label.name, project=project.name)
            continue
        to_apply.append(label.name)

    if not to_apply:
        logger.debug("triage.nothing_to_apply", issue_number=number)
        return []

    await github.add_labels(owner, repo, number, to_apply)
    logger.info("triage.labels_added", labels=to_apply, issue_number=number)
    return to_apply
