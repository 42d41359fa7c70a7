"""Moving issues between project columns when release labels are applied.

A label ``{release}/{action}`` moves the issue's card on the open project
whose name starts with ``{release}`` into the column for ``{action}``:

    * triage        -> Triage
    * cherry-pick   -> Cherry Pick
    * cherry-picked -> Cherry Picked

Actions outside that table use the action itself as the column name, so
``17.03.1-ee/bleh`` targets the ``bleh`` column of ``17.03.1-ee-1-rc1`` if the
board has one.  Issues that are not on the board yet get a new card.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from releasebot.exceptions import PayloadUnparseableError
from releasebot.github.labels import column_name_for, split_label
from releasebot.github.projects import resolve_project, scan_board
from releasebot.models import ColumnAction

if TYPE_CHECKING:
    from releasebot.github.client import GitHubClient
    from releasebot.models import IssuesEvent


logger = structlog.get_logger()


async def reconcile_labeled(github: GitHubClient, event: IssuesEvent) -> ColumnAction:
    """Create or move the issue's card to match the label that was just added.

    Issues at most one write: either a card creation or a card move.
    """
    if event.label is None:
        raise PayloadUnparseableError("labeled event carries no label")

    issue = event.issue
    prefix, suffix = split_label(event.label.name)
    column_name = column_name_for(suffix)
    project = await resolve_project(github, event.owner, event.repo, prefix)

    # Cleared by run_reconciler once the event is done; failures it logs carry these
    structlog.contextvars.bind_contextvars(project=project.name, column=column_name)

    columns = await github.list_columns(project)
    scan = await scan_board(github, columns, column_name, issue.url)

    if scan.destination is None:
        logger.info("columns.destination_missing")
        return ColumnAction.SKIPPED

    if scan.card is None:
        content_type = "PullRequest" if issue.is_pull_request else "Issue"
        await github.create_card(scan.destination, issue.id, content_type)
        logger.info("columns.card_created", content_type=content_type)
        return ColumnAction.CREATED

    await github.move_card(scan.card, scan.destination, position="top")
    logger.info("columns.card_moved", source=scan.source.name if scan.source else None)
    return ColumnAction.MOVED
