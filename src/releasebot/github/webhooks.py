"""GitHub webhook receiver.

Every delivery is verified against the shared secret, parsed into one of
the event variants below and, when it is an issue being opened or labelled,
handed to a reconciler that runs after the response has been sent.  GitHub
only needs a fast acknowledgement; reconciliation failures show up in the
logs, never in the HTTP response.
"""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated
from urllib.parse import parse_qs

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, Request
from pydantic import ValidationError

from releasebot.config import Settings
from releasebot.exceptions import PayloadUnparseableError, ReleaseBotError, SignatureInvalidError
from releasebot.github.client import GitHubClient
from releasebot.models import IssuesEvent
from releasebot.reconcile.columns import reconcile_labeled
from releasebot.reconcile.triage import reconcile_opened

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = structlog.get_logger()

router = APIRouter(tags=["webhooks"])

SIGNATURE_ALGORITHMS = {
    "sha256": hashlib.sha256,
    "sha1": hashlib.sha1,
}


# -- event variants -------------------------------------------------------------


@dataclass(frozen=True)
class IssueOpened:
    event: IssuesEvent


@dataclass(frozen=True)
class IssueLabeled:
    event: IssuesEvent


@dataclass(frozen=True)
class Ignored:
    """A delivery we accept but do nothing with."""

    event_type: str
    action: str | None = None


WebhookEvent = IssueOpened | IssueLabeled | Ignored


# -- verification and parsing ---------------------------------------------------


def verify_signature(payload: bytes, signature: str, secret: bytes) -> None:
    """Verify a ``sha256=...`` or ``sha1=...`` webhook signature.

    An empty secret disables verification.

    Raises:
        SignatureInvalidError: if the signature is missing, uses an unknown
            algorithm, or does not match.
    """
    if not secret:
        return
    algorithm, _, digest = signature.partition("=")
    hash_func = SIGNATURE_ALGORITHMS.get(algorithm)
    if hash_func is None or not digest:
        raise SignatureInvalidError(f"unsupported or missing signature '{algorithm}'")
    expected = hmac.new(secret, payload, hash_func).hexdigest()
    if not hmac.compare_digest(expected, digest):
        raise SignatureInvalidError("signature does not match payload")


def decode_payload(body: bytes, content_type: str) -> dict:
    """Decode a JSON or form-encoded (``payload=...``) webhook body."""
    try:
        if content_type.startswith("application/x-www-form-urlencoded"):
            form = parse_qs(body.decode())
            if "payload" not in form:
                raise PayloadUnparseableError("form body has no payload field")
            data = json.loads(form["payload"][0])
        else:
            data = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise PayloadUnparseableError(f"invalid payload: {exc}") from exc
    if not isinstance(data, dict):
        raise PayloadUnparseableError("payload is not a JSON object")
    return data


def parse_event(event_type: str, data: dict) -> WebhookEvent:
    """Turn a decoded delivery into an event variant."""
    if not event_type:
        raise PayloadUnparseableError("missing X-GitHub-Event header")
    action = data.get("action")
    if event_type != "issues" or action not in ("opened", "labeled"):
        return Ignored(event_type, action)

    try:
        event = IssuesEvent.model_validate(data)
    except ValidationError as exc:
        raise PayloadUnparseableError(f"invalid issues payload: {exc}") from exc

    if action == "opened":
        return IssueOpened(event)
    if event.label is None:
        raise PayloadUnparseableError("labeled event carries no label")
    return IssueLabeled(event)


# -- background reconciliation ----------------------------------------------------


async def run_reconciler(
    reconcile: Callable[[GitHubClient, IssuesEvent], Awaitable[object]],
    github: GitHubClient,
    event: IssuesEvent,
    *,
    timeout: float,
    path: str,
) -> None:
    """Run one reconciler under a time budget, logging instead of raising.

    The log context belongs to this event: reconcilers may bind more keys
    (project, column) and everything is cleared once the event is done.
    """
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        path=path,
        action=event.action,
        issue_number=event.issue.number,
    )
    try:
        async with asyncio.timeout(timeout):
            result = await reconcile(github, event)
    except TimeoutError:
        logger.error("webhook.reconcile_timeout", timeout=timeout)
    except ReleaseBotError as exc:
        logger.error("webhook.reconcile_failed", error_type=type(exc).__name__, error=str(exc))
    except Exception:
        logger.exception("webhook.reconcile_error")
    else:
        logger.info("webhook.reconciled", result=result)
    finally:
        structlog.contextvars.clear_contextvars()


def get_app_settings(request: Request) -> Settings:
    """The settings loaded at startup."""
    return request.app.state.settings


def get_github(request: Request) -> GitHubClient:
    """The GitHub client built at startup."""
    return request.app.state.github


@router.post("/{owner}/{repo}")
async def github_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Annotated[Settings, Depends(get_app_settings)],
    github: Annotated[GitHubClient, Depends(get_github)],
    x_github_event: str = Header(default=""),
    x_github_delivery: str = Header(default=""),
    x_hub_signature_256: str = Header(default=""),
    x_hub_signature: str = Header(default=""),
) -> dict:
    """Handle incoming GitHub webhook deliveries."""
    path = request.url.path
    payload = await request.body()
    logger.debug("webhook.received", path=path, github_event=x_github_event, delivery=x_github_delivery)

    signature = x_hub_signature_256 or x_hub_signature
    try:
        verify_signature(payload, signature, settings.webhook_secret)
    except SignatureInvalidError as exc:
        logger.error("webhook.signature_invalid", path=path, delivery=x_github_delivery, error=str(exc))
        raise HTTPException(status_code=401, detail="Secret did not match") from exc

    try:
        data = decode_payload(payload, request.headers.get("content-type", ""))
        parsed = parse_event(x_github_event, data)
    except PayloadUnparseableError as exc:
        logger.error("webhook.payload_invalid", path=path, error=str(exc))
        raise HTTPException(status_code=400, detail="Bad webhook payload") from exc

    if isinstance(parsed, IssueOpened):
        reconcile = reconcile_opened
    elif isinstance(parsed, IssueLabeled):
        reconcile = reconcile_labeled
    else:
        logger.debug("webhook.ignored", path=path, github_event=parsed.event_type, action=parsed.action)
        return {"status": "ignored"}

    logger.info(
        "webhook.dispatched",
        path=path,
        action=parsed.event.action,
        issue_number=parsed.event.issue.number,
    )
    background_tasks.add_task(
        run_reconciler,
        reconcile,
        github,
        parsed.event,
        timeout=settings.release_bot_reconcile_timeout,
        path=path,
    )
    return {"status": "ok"}
