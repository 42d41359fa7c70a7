"""Errors raised while verifying webhooks and reconciling GitHub state."""

from __future__ import annotations


class ReleaseBotError(Exception):
    """Base exception for release-bot errors."""


class SignatureInvalidError(ReleaseBotError):
    """Webhook payload signature did not match the configured secret."""


class PayloadUnparseableError(ReleaseBotError):
    """Webhook payload could not be parsed into a known event."""


class MalformedLabelError(ReleaseBotError):
    """Label does not match the ``{release}/{action}`` pattern."""

    def __init__(self, label: str) -> None:
        super().__init__(f"Label '{label}' does not match pattern {{release}}/{{action}}")
        self.label = label


class NoProjectFoundError(ReleaseBotError):
    """No open project has a name starting with the requested prefix."""

    def __init__(self, prefix: str) -> None:
        super().__init__(f"No open project found with prefix '{prefix}'")
        self.prefix = prefix


class RemoteAPIError(ReleaseBotError):
    """A GitHub API call failed."""

    def __init__(self, operation: str, status_code: int | None = None, detail: str = "") -> None:
        message = f"GitHub call to {operation} failed"
        if status_code is not None:
            message += f" with status {status_code}"
        if detail:
            message += f": {detail}"
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code
