"""Decide whether a freshly generated QA scenario was already verified by a human.

The model rewrites scenario wording on every run, so an exact string match
against the previous review's checked items would reset the checklist after
each push. Matching is done on normalised text with three rules, tried in
order for each previously checked scenario:

1. exact equality
2. containment in either direction
3. word overlap: |A ∩ B| / min(|A|, |B|) >= overlap_threshold

Note that rule 2 compares characters, not words, so a very short checked
scenario can match inside an unrelated longer one.

Normalisation keeps every Unicode letter and digit (Python's ``\\w``), so
accented or non-Latin scenario text is compared word for word rather than
being stripped down to its ASCII characters.
"""

from __future__ import annotations

import re
from typing import Iterable

DEFAULT_OVERLAP_THRESHOLD = 0.7

_NON_WORD_RE = re.compile(r"[^\w\s]")


def normalize_scenario(text: str) -> str:
    """Lowercase, drop punctuation, trim surrounding whitespace."""
    return _NON_WORD_RE.sub("", text.lower()).strip()


def _word_overlap(a: str, b: str) -> float:
    words_a = set(a.split())
    words_b = set(b.split())
    smallest = min(len(words_a), len(words_b))
    if smallest == 0:
        return 0.0
    return len(words_a & words_b) / smallest


def _matches(a: str, b: str, overlap_threshold: float) -> bool:
    if not a or not b:
        # An empty string is a substring of everything.
        return False
    if a == b:
        return True
    if b in a or a in b:
        return True
    return _word_overlap(a, b) >= overlap_threshold


def is_carried_forward(
    candidate: str,
    checked: Iterable[str],
    overlap_threshold: float = DEFAULT_OVERLAP_THRESHOLD,
) -> bool:
    """Return True if candidate matches any previously checked scenario."""
    normalized = normalize_scenario(candidate)
    return any(_matches(normalized, normalize_scenario(item), overlap_threshold) for item in checked)
