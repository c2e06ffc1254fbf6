from __future__ import annotations

from github import Github

DISMISS_MESSAGE = "🔄 Updated review available below (PR was updated)"


def get_repo(repo_name: str, token: str):
    return Github(token).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def get_pull_requests(repo, state: str = "open"):
    return repo.get_pulls(state=state)


def get_changed_files(pr):
    return pr.get_files()


def list_reviews(pr):
    return pr.get_reviews()


def dismiss_review(review, message: str = DISMISS_MESSAGE) -> None:
    review.dismiss(message)


def build_unified_diff(files) -> str:
    """Rebuild the PR's unified diff from the per-file patches GitHub returns.

    The files API gives each file's hunks without the ``---``/``+++`` headers;
    those are restored here so the text has the same shape as the PR's
    ``.diff`` download. Files without a patch (binary, too large) still get
    their headers so the per-file position counter restarts correctly.
    """
    blocks = []
    for f in files:
        old_path = getattr(f, "previous_filename", None) or f.filename
        lines = [f"diff --git a/{old_path} b/{f.filename}"]
        lines.append("--- /dev/null" if f.status == "added" else f"--- a/{old_path}")
        lines.append("+++ /dev/null" if f.status == "removed" else f"+++ b/{f.filename}")
        if f.patch:
            lines.append(f.patch.rstrip("\n"))
        blocks.append("\n".join(lines))
    return "\n".join(blocks) + ("\n" if blocks else "")
