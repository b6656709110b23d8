"""Property-based tests for branch-name slugs using Hypothesis.

These tests verify the invariants git and the worktree layout rely on:
- Slugs contain only lowercase ASCII alphanumerics and hyphens
- Slugs never start or end with a hyphen, and never repeat one
- Slugs stay within MAX_SLUG_LEN
- Branch names always have a non-empty leaf under the prefix
"""

from __future__ import annotations

import re

from hypothesis import given, settings
from hypothesis import strategies as st

from agentdeck.tasks.naming import MAX_SLUG_LEN, build_branch_name, slug

_SLUG_RE = re.compile(r"^(?:[a-z0-9]+(?:-[a-z0-9]+)*)?$")

_SURROGATE_CATEGORIES: tuple[str, ...] = ("Cs",)
text_strategy = st.text(
    alphabet=st.characters(blacklist_categories=_SURROGATE_CATEGORIES),  # type: ignore[arg-type]
    min_size=0,
    max_size=300,
)


@given(name=text_strategy)
@settings(max_examples=300)
def test_slug_alphabet_and_edges(name: str) -> None:
    result = slug(name)
    assert _SLUG_RE.match(result), result
    assert len(result) <= MAX_SLUG_LEN


@given(name=text_strategy)
def test_slug_is_idempotent(name: str) -> None:
    once = slug(name)
    assert slug(once) == once


@given(name=text_strategy)
def test_branch_name_has_leaf(name: str) -> None:
    prefix, _, leaf = build_branch_name(name).rpartition("/")
    assert prefix == "task"
    assert _SLUG_RE.match(leaf)
    assert leaf
