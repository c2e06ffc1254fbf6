"""Turn model-reported issues into inline review comments GitHub can anchor."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any

from sherlockqa_core.diff import PositionMap

logger = logging.getLogger(__name__)


class Severity(enum.IntEnum):
    SUGGESTION = 1
    WARNING = 2
    ERROR = 3

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, value: Any, default: Severity | None = None) -> Severity | None:
        """Look up a severity by its lowercase name, returning default when unknown."""
        if isinstance(value, Severity):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        return default


_SEVERITY_EMOJI = {
    Severity.ERROR: "🔴",
    Severity.WARNING: "🟡",
    Severity.SUGGESTION: "🔵",
}


@dataclass(frozen=True)
class Issue:
    file: str
    line: int
    severity: Severity
    comment: str

    @classmethod
    def from_dict(cls, data: Any) -> Issue | None:
        """Build an Issue from one entry of the model's ``line_comments`` list.

        Returns None for entries that cannot be placed at all (no file, no
        usable line number, or no message). Unknown severities are kept as
        suggestions so that a strict threshold filters them out.
        """
        if not isinstance(data, dict):
            return None
        file = data.get("file")
        comment = data.get("comment")
        try:
            line = int(data.get("line"))
        except (TypeError, ValueError):
            return None
        if not file or not comment:
            return None
        severity = Severity.parse(data.get("severity"), default=Severity.SUGGESTION)
        return cls(file=str(file), line=line, severity=severity, comment=str(comment))


@dataclass(frozen=True)
class PlacedComment:
    path: str
    position: int
    body: str
    line: int
    severity: Severity

    def to_api(self) -> dict:
        """Shape expected by PullRequest.create_review(comments=...)."""
        return {"path": self.path, "position": self.position, "body": self.body}


def format_comment_body(issue: Issue) -> str:
    emoji = _SEVERITY_EMOJI.get(issue.severity, "🔵")
    return f"{emoji} **{issue.severity.label.upper()}**: {issue.comment}"


def place_comments(
    issues: list[Issue],
    position_map: PositionMap,
    min_severity: Severity = Severity.WARNING,
) -> list[PlacedComment]:
    """Resolve issues to diff positions, keeping only those at or above min_severity.

    An issue whose (file, line) is absent from the position map — a deleted
    line, a line outside every hunk, or a line the model made up — is dropped.
    Input order is preserved and co-located comments are never merged.
    """
    placed: list[PlacedComment] = []
    for issue in issues:
        if issue.severity < min_severity:
            continue
        position = position_map.get(issue.file, {}).get(issue.line)
        if position is None:
            logger.debug("Skipping %s comment on %s:%d (not in diff)", issue.severity.label, issue.file, issue.line)
            continue
        placed.append(
            PlacedComment(
                path=issue.file,
                position=position,
                body=format_comment_body(issue),
                line=issue.line,
                severity=issue.severity,
            )
        )
    return placed
