"""Markdown rendering of the top-level review body.

compose_review_body() is a deterministic renderer: it makes no judgement
beyond deciding, per QA scenario, whether a human already ticked an
equivalent item in a previous review. Every section is optional and is left
out entirely when its data is missing.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Any, Iterable

from sherlockqa_core.placement import Issue
from sherlockqa_core.reconcile import REVIEW_MARKER
from sherlockqa_core.scenarios import DEFAULT_OVERLAP_THRESHOLD, is_carried_forward


class Verdict(str, enum.Enum):
    APPROVED = "approved"
    NEEDS_CHANGES = "needs_changes"
    DO_NOT_MERGE = "do_not_merge"


_VERDICT_DISPLAY = {
    Verdict.APPROVED.value: ("✅", "Approved"),
    Verdict.NEEDS_CHANGES.value: ("⚠️", "Needs Changes"),
    Verdict.DO_NOT_MERGE.value: ("❌", "Do Not Merge"),
}


class Layout(str, enum.Enum):
    COMPACT = "compact"
    DETAILED = "detailed"


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item not in (None, "")]


@dataclass
class CodeQuality:
    summary: str = ""
    issues: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> CodeQuality | None:
        if not isinstance(data, dict):
            return None
        return cls(summary=str(data.get("summary") or ""), issues=_string_list(data.get("issues")))

    def is_empty(self) -> bool:
        return not self.summary and not self.issues


@dataclass
class ReviewData:
    """Structured review as returned by the model, after lenient validation."""

    summary: str = ""
    analysis: str = ""
    line_comments: list[Issue] = field(default_factory=list)
    tests_required: bool = False
    test_suggestion: str = ""
    qa_scenarios: list[str] = field(default_factory=list)
    questions: list[str] = field(default_factory=list)
    code_quality: CodeQuality | None = None
    verdict: str | None = None
    # Entries of line_comments the model returned but that could not be read.
    dropped_comments: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> ReviewData:
        raw_comments = data.get("line_comments")
        raw_comments = raw_comments if isinstance(raw_comments, list) else []
        issues = [issue for issue in (Issue.from_dict(c) for c in raw_comments) if issue is not None]
        verdict = data.get("verdict")
        return cls(
            summary=str(data.get("summary") or ""),
            analysis=str(data.get("analysis") or ""),
            line_comments=issues,
            tests_required=_as_bool(data.get("tests_required")),
            test_suggestion=str(data.get("test_suggestion") or ""),
            qa_scenarios=_string_list(data.get("qa_scenarios")),
            questions=_string_list(data.get("questions")),
            code_quality=CodeQuality.from_dict(data.get("code_quality")),
            verdict=str(verdict) if verdict else None,
            dropped_comments=len(raw_comments) - len(issues),
        )

    @classmethod
    def fallback(cls) -> ReviewData:
        """Neutral review used when the model's response cannot be parsed."""
        return cls(summary="Unable to parse AI response", verdict=Verdict.NEEDS_CHANGES.value)


# Checkbox tokens in free text would read back as ticked scenarios next run.
_CHECKBOX_RE = re.compile(r"\[([ xX])\]")


def _plain(text: str) -> str:
    return _CHECKBOX_RE.sub(r"\\[\1]", text)


def _verdict_line(verdict: str) -> str:
    emoji, text = _VERDICT_DISPLAY.get(verdict, ("⚠️", verdict))
    return f"{emoji} {text}"


def _section(title: str, lines: list[str], collapsible: bool) -> list[str]:
    if collapsible:
        return ["<details>", f"<summary><b>{title}</b></summary>", "", *lines, "", "</details>", ""]
    return [f"### {title}", *lines, ""]


def _stats_line(review: ReviewData, carried: int) -> str:
    parts = [f"**{len(review.line_comments)}** issue(s)"]
    if review.qa_scenarios:
        parts.append(f"**{carried}/{len(review.qa_scenarios)}** QA scenario(s) verified")
    if review.questions:
        parts.append(f"**{len(review.questions)}** question(s)")
    if review.tests_required:
        parts.append("tests required")
    return " · ".join(parts)


def compose_review_body(
    review: ReviewData,
    checked: Iterable[str] = (),
    layout: Layout | str = Layout.DETAILED,
    author: str | None = None,
    marker: str = REVIEW_MARKER,
    overlap_threshold: float = DEFAULT_OVERLAP_THRESHOLD,
) -> str:
    """Render the review body posted alongside the inline comments.

    The marker header always comes first; it is what lets the next run
    recognise this review as ours. In the compact layout a stats line follows
    the summary and the longer sections collapse into <details> blocks; the
    detailed layout renders everything expanded. Section content and the
    checkbox decisions are the same in both.
    """
    compact = Layout(layout) is Layout.COMPACT
    checked = list(checked)
    scenario_states = [
        (scenario, is_carried_forward(scenario, checked, overlap_threshold)) for scenario in review.qa_scenarios
    ]

    parts = [f"{marker}\n"]

    if review.summary:
        parts.extend(["### 📝 Summary", _plain(review.summary), ""])

    if compact:
        carried = sum(1 for _, is_checked in scenario_states if is_checked)
        parts.extend([_stats_line(review, carried), ""])

    if review.analysis:
        parts.extend(_section("🔬 Analysis", [_plain(review.analysis)], compact))

    if review.tests_required and review.test_suggestion:
        mention = f"**@{author}**" if author else "**Author**"
        parts.extend(
            _section(
                "🧪 Tests Required",
                [f"⚠️ {mention} - Please add test cases for this change:", "", _plain(review.test_suggestion)],
                compact,
            )
        )

    if scenario_states:
        # Never collapsed; reconciliation reads these lines back on the next run.
        parts.append("### 🎯 QA Test Scenarios")
        for scenario, is_checked in scenario_states:
            parts.append(f"- {'[x]' if is_checked else '[ ]'} {scenario}")
        parts.append("")

    if review.questions:
        parts.extend(_section("❓ Questions", [f"- {_plain(q)}" for q in review.questions], compact))

    if review.code_quality is not None and not review.code_quality.is_empty():
        lines = []
        if review.code_quality.summary:
            lines.extend([_plain(review.code_quality.summary), ""])
        lines.extend(f"- {_plain(issue)}" for issue in review.code_quality.issues)
        parts.extend(_section("🧹 Code Quality", lines, compact))

    if review.verdict:
        parts.extend(["### 🏁 Verdict", _verdict_line(review.verdict)])

    return "\n".join(parts).rstrip() + "\n"
