"""Recover QA checklist progress from sherlockqa's previous reviews on a PR.

Each run posts a fresh review. Before doing so, the scenarios a human ticked
in earlier sherlockqa reviews are collected so the new checklist can carry
them forward (see sherlockqa_core.scenarios). Only review bodies that carry
our header marker are read: a human's own review may contain checkboxes too,
and those are never treated as checklist state.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Iterable

logger = logging.getLogger(__name__)

REVIEW_MARKER = "## 🔍 SherlockQA's Review"

_CHECKED_ITEM_RE = re.compile(r"- \[x\] (.+)", re.IGNORECASE)


def is_own_review(body: str | None, marker: str = REVIEW_MARKER) -> bool:
    return bool(body) and marker in body


def _checked_items(body: str) -> set[str]:
    items = set()
    for match in _CHECKED_ITEM_RE.finditer(body):
        text = match.group(1).strip()
        if text:
            items.add(text)
    return items


def extract_checked(prior_documents: Iterable[str | None], marker: str = REVIEW_MARKER) -> set[str]:
    """Return every checked checklist item from the documents that carry marker.

    Items are stored exactly as written (trimmed only); normalisation happens
    at match time so this stays a faithful record of what was ticked.
    """
    checked: set[str] = set()
    for body in prior_documents:
        if is_own_review(body, marker):
            checked |= _checked_items(body)
    return checked


def reconcile_previous_reviews(
    reviews: Iterable,
    dismiss: Callable[[object], None] | None = None,
    marker: str = REVIEW_MARKER,
) -> set[str]:
    """Collect checked scenarios from our earlier reviews, then dismiss those reviews.

    ``reviews`` are objects with ``id`` and ``body`` attributes (PyGithub
    PullRequestReview). Dismissal only collapses the outdated review in the
    GitHub UI; GitHub refuses it for reviews in the COMMENTED state, so a
    failure is logged and the remaining reviews are still processed.
    """
    checked: set[str] = set()
    for review in reviews:
        body = getattr(review, "body", None)
        if not is_own_review(body, marker):
            continue
        checked |= _checked_items(body)

        if dismiss is None:
            continue
        try:
            dismiss(review)
            logger.info("Dismissed previous review #%s", review.id)
        except Exception as e:
            logger.info("Could not dismiss review #%s: %s", getattr(review, "id", "?"), e)

    return checked
