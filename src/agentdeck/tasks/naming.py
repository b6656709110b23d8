"""Branch naming for tasks.

Task names are free-form; branch names must be safe for git refs and for the
worktree directory derived from them.
"""

from __future__ import annotations

import re

MAX_SLUG_LEN = 72
DEFAULT_TASK_SLUG = "untitled"
DEFAULT_BRANCH_PREFIX = "task"

_SEPARATOR_RUN = re.compile(r"[^a-z0-9]+")
_SLASH_RUN = re.compile(r"/+")


def slug(name: str) -> str:
    """Lower-case ``name`` and reduce it to ``[a-z0-9-]``.

    Every run of other characters becomes one hyphen; leading and trailing
    hyphens are stripped. The result never exceeds MAX_SLUG_LEN characters
    and may be empty.

    >>> slug("Fix  Login -- Bug!")
    'fix-login-bug'
    """
    collapsed = _SEPARATOR_RUN.sub("-", name.lower())
    return collapsed[:MAX_SLUG_LEN].strip("-")


def sanitize_branch_prefix(prefix: str) -> str:
    """Normalize a user-supplied prefix such as ``Feature//Team Name``.

    Each ``/``-separated segment is slugged and empty segments are dropped;
    an empty result falls back to DEFAULT_BRANCH_PREFIX.
    """
    normalized = _SLASH_RUN.sub("/", prefix.strip().replace("\\", "/"))
    parts = [s for s in (slug(part) for part in normalized.split("/")) if s]
    return "/".join(parts) or DEFAULT_BRANCH_PREFIX


def build_branch_name(name: str, prefix: str = DEFAULT_BRANCH_PREFIX) -> str:
    """Return ``<prefix>/<slug(name)>``, using ``untitled`` for an empty slug."""
    return f"{sanitize_branch_prefix(prefix)}/{slug(name) or DEFAULT_TASK_SLUG}"


__all__ = [
    "DEFAULT_BRANCH_PREFIX",
    "DEFAULT_TASK_SLUG",
    "MAX_SLUG_LEN",
    "build_branch_name",
    "sanitize_branch_prefix",
    "slug",
]
