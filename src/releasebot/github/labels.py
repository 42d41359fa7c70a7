"""Label naming conventions.

Release labels look like ``{release}/{action}``, e.g. ``17.03.1-ee/cherry-pick``.
The release part selects a project board by prefix, the action part selects
a column on that board.
"""

from __future__ import annotations

from releasebot.exceptions import MalformedLabelError

TRIAGE_SUFFIX = "triage"

# Label action -> project column name; unmapped actions use the action verbatim
COLUMN_NAMES = {
    "triage": "Triage",
    "cherry-pick": "Cherry Pick",
    "cherry-picked": "Cherry Picked",
}


def split_label(label: str) -> tuple[str, str]:
    """Split ``{release}/{action}`` into its two parts.

    Raises:
        MalformedLabelError: unless there is exactly one ``/`` with text on
            both sides of it.
    """
    parts = label.split("/")
    if len(parts) != 2 or not all(parts):
        raise MalformedLabelError(label)
    return parts[0], parts[1]


def is_triage_label(label: str) -> bool:
    return label.endswith(f"/{TRIAGE_SUFFIX}")


def column_name_for(suffix: str) -> str:
    return COLUMN_NAMES.get(suffix, suffix)
