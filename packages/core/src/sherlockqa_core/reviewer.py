"""Core PR review orchestration."""

from __future__ import annotations

import fnmatch
import logging
import uuid
from dataclasses import dataclass, field

from github import GithubException
from rich.console import Console

from sherlockqa_core.diff import index_diff
from sherlockqa_core.gh.pull_request import (
    build_unified_diff,
    dismiss_review,
    get_changed_files,
    get_pull,
    get_repo,
    list_reviews,
)
from sherlockqa_core.placement import PlacedComment, Severity, place_comments
from sherlockqa_core.providers.factory import get_reviewer
from sherlockqa_core.reconcile import reconcile_previous_reviews
from sherlockqa_core.render import Verdict, compose_review_body

console = Console()
logger = logging.getLogger(__name__)

_SEVERITY_COLOR = {Severity.ERROR: "red", Severity.WARNING: "yellow", Severity.SUGGESTION: "blue"}


@dataclass
class ReviewOutcome:
    """What a review run produced: enough for the CLI to report and set action outputs."""

    verdict: str
    summary: str
    issues_count: int
    event: str  # "APPROVE" | "COMMENT" | "REQUEST_CHANGES"
    body: str = ""
    comments: list[PlacedComment] = field(default_factory=list)
    posted: bool = False


def matches_ignore_pattern(filename: str, pattern: str) -> bool:
    """Return True if filename is covered by one ignore pattern.

    Supports:
    - extension patterns: "*.lock" matches any path ending in ".lock"
    - fnmatch globs on the full path: "src/generated/*.py"
    - exact paths and plain substrings: "dist/" matches "web/dist/app.js"
    """
    if not pattern:
        return False
    if pattern.startswith("*.") and filename.endswith(pattern[1:]):
        return True
    if fnmatch.fnmatch(filename, pattern):
        return True
    return filename == pattern or pattern in filename


def _is_ignored(filename: str, patterns: list[str]) -> bool:
    return any(matches_ignore_pattern(filename, p) for p in patterns)


def _determine_event(verdict: str | None, auto_approve: bool) -> str:
    """Map the model's verdict to a GitHub review event.

    APPROVE needs either a PAT or "Allow GitHub Actions to approve pull
    requests" enabled in the repository's Actions settings.
    """
    if verdict == Verdict.APPROVED.value and auto_approve:
        return "APPROVE"
    if verdict == Verdict.DO_NOT_MERGE.value:
        return "REQUEST_CHANGES"
    return "COMMENT"


def _collect_checked_scenarios(pr, marker: str, dismiss: bool) -> set[str]:
    try:
        reviews = list(list_reviews(pr))
    except GithubException as e:
        logger.warning("Failed to check for previous reviews: %s", e)
        return set()
    return reconcile_previous_reviews(reviews, dismiss=dismiss_review if dismiss else None, marker=marker)


def print_shadow_review(body: str, comments: list[PlacedComment]) -> None:
    """Print the review to the terminal without posting to GitHub."""
    console.print("\n[bold]Shadow review (not posted)[/bold]\n")
    console.print(body, markup=False)
    if not comments:
        console.print("[yellow]No inline comments.[/yellow]")
        return
    console.print(f"\n[bold]{len(comments)} inline comment(s)[/bold]\n")
    for c in comments:
        color = _SEVERITY_COLOR.get(c.severity, "white")
        console.print(
            f"[bold cyan]{c.path}[/bold cyan]  line [bold]{c.line}[/bold]  "
            f"(position {c.position})  [{color}]{c.severity.label.upper()}[/{color}]"
        )
        console.print(f"  {c.body}", markup=False)
        console.print()


def write_action_outputs(outcome: ReviewOutcome, output_path: str) -> None:
    """Append step outputs in the GitHub Actions $GITHUB_OUTPUT file format.

    Values go through the heredoc form so a multi-line summary cannot break
    the file.
    """
    values = {
        "verdict": outcome.verdict,
        "summary": outcome.summary,
        "issues-count": str(outcome.issues_count),
    }
    with open(output_path, "a", encoding="utf-8") as f:
        for name, value in values.items():
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")


def run_review(
    repo: str,
    pr_number: int,
    config: dict,
    shadow: bool = False,
    repo_obj=None,
) -> ReviewOutcome | None:
    """Run the full PR review pipeline and return a ReviewOutcome.

    Returns None when nothing is left to review after applying ignore_patterns.
    In shadow mode previous reviews are read but neither dismissed nor
    replaced.
    """
    this_repo = repo_obj if repo_obj is not None else get_repo(repo, token=config["github_token"])

    try:
        this_pr = get_pull(this_repo, pr_number)
    except GithubException:
        raise ValueError(f"PR #{pr_number} not found in {repo}.")

    author = this_pr.user.login
    head_sha = this_pr.head.sha
    marker = config["review_marker"]
    console.print(f"Reviewing PR #{pr_number} by @{author}")

    checked = _collect_checked_scenarios(this_pr, marker, dismiss=not shadow)
    if checked:
        console.print(f"[dim]Carrying forward {len(checked)} checked scenario(s) from previous reviews.[/dim]")

    files = sorted(get_changed_files(this_pr), key=lambda f: f.filename)
    ignore_patterns = config.get("ignore_patterns", [])
    files_to_review = [f for f in files if not _is_ignored(f.filename, ignore_patterns)]

    if not files_to_review:
        console.print("[yellow]No files to review after filtering.[/yellow]")
        return None

    console.print(f"Reviewing {len(files_to_review)} file(s) using {config['provider']}")

    # The diff covers every changed file so positions match what GitHub shows;
    # only the prompt is restricted to files that were not ignored.
    full_diff = build_unified_diff(files)
    review_diff = build_unified_diff(files_to_review)

    reviewer = get_reviewer(config)
    review = reviewer.review(review_diff, [f.filename for f in files_to_review], author)
    verdict = review.verdict or Verdict.NEEDS_CHANGES.value
    console.print(f"Review verdict: {verdict}")
    console.print(f"Found {len(review.line_comments)} issue(s)")

    position_map = index_diff(full_diff)
    min_severity = Severity.parse(config.get("min_severity"), default=Severity.SUGGESTION)
    comments = place_comments(review.line_comments, position_map, min_severity)
    if len(comments) < len(review.line_comments):
        logger.info(
            "%d of %d issue(s) filtered by severity or outside the diff",
            len(review.line_comments) - len(comments),
            len(review.line_comments),
        )

    body = compose_review_body(
        review,
        checked,
        layout=config.get("layout", "detailed"),
        author=author,
        marker=marker,
        overlap_threshold=config["scenario_overlap_threshold"],
    )
    event = _determine_event(review.verdict, config.get("auto_approve", False))

    outcome = ReviewOutcome(
        verdict=verdict,
        summary=review.summary,
        issues_count=len(review.line_comments),
        event=event,
        body=body,
        comments=comments,
    )

    if shadow:
        print_shadow_review(body, comments)
        console.print(f"[bold]Shadow review complete. Would post {event} with {len(comments)} comment(s).[/bold]")
        return outcome

    this_pr.create_review(
        commit=this_repo.get_commit(head_sha),
        body=body,
        event=event,
        comments=[c.to_api() for c in comments],
    )
    outcome.posted = True
    console.print(f"\n[green]Review posted: {event}. {len(comments)} inline comment(s).[/green]")
    return outcome
