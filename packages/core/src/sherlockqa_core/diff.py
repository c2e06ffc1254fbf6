"""Unified diff → GitHub diff position mapping.

GitHub's review comment API anchors an inline comment by ``position``: a
1-based counter over the lines of one file's block in the PR diff. The ``@@``
hunk header lines count toward the position, and the counter is cumulative
across every hunk of the file, only resetting at the next ``+++ b/<path>``
header.

index_diff() walks the full PR diff once and returns, per file, the position
of every new-file line that appears in the diff (additions and context).
Lines are split on ``\\n`` only, as GitHub counts them, so form feeds or
U+2028 inside source lines never create extra lines. Unrecognised lines are
skipped rather than raised on; a missing entry simply means a comment for
that line cannot be placed.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field

PositionMap = dict[str, dict[int, int]]

FILE_HEADER_PREFIX = "+++ b/"

_HUNK_RE = re.compile(
    r"^@@ -\d+(?:,(?P<old_count>\d+))? \+(?P<new_start>\d+)(?:,(?P<new_count>\d+))? @@"
)

# git extended headers that sit between two files' blocks.
_EXTENDED_HEADER_PREFIXES = (
    "diff --git ",
    "index ",
    "--- ",
    "+++ ",
    "new file mode ",
    "deleted file mode ",
    "old mode ",
    "new mode ",
    "similarity index ",
    "dissimilarity index ",
    "rename from ",
    "rename to ",
    "copy from ",
    "copy to ",
    "Binary files ",
)


class LineKind(enum.Enum):
    FILE_HEADER = "file_header"
    HUNK_HEADER = "hunk_header"
    ADDED = "added"
    REMOVED = "removed"
    CONTEXT = "context"
    NO_NEWLINE = "no_newline"
    IGNORABLE = "ignorable"


def _classify_hunk_body(line: str) -> LineKind | None:
    if line.startswith("+"):
        return LineKind.ADDED
    if line.startswith("-"):
        return LineKind.REMOVED
    if line.startswith(" ") or line == "":
        return LineKind.CONTEXT
    if line.startswith("\\"):
        return LineKind.NO_NEWLINE
    return None


def classify_line(line: str, in_hunk: bool = False) -> LineKind:
    """Tag a single diff line with the role it plays in the position walk.

    Inside a hunk body only the first character counts, so a removed
    ``-- comment`` line (``--- comment`` in the diff) stays REMOVED instead of
    being mistaken for a file header.
    """
    if in_hunk:
        kind = _classify_hunk_body(line)
        if kind is not None:
            return kind
    if line.startswith(FILE_HEADER_PREFIX):
        return LineKind.FILE_HEADER
    if _HUNK_RE.match(line):
        return LineKind.HUNK_HEADER
    if line.startswith("+") and not line.startswith("+++"):
        return LineKind.ADDED
    if line.startswith("-") and not line.startswith("---"):
        return LineKind.REMOVED
    if line.startswith("\\"):
        return LineKind.NO_NEWLINE
    if line.startswith(_EXTENDED_HEADER_PREFIXES):
        return LineKind.IGNORABLE
    return LineKind.CONTEXT


def parse_hunk_header(line: str) -> int | None:
    """Return the new-file start line of a ``@@`` header, or None if it is not one."""
    match = _HUNK_RE.match(line)
    if match is None:
        return None
    return int(match.group("new_start"))


def _hunk_counts(line: str) -> tuple[int, int]:
    # An omitted count means one line.
    match = _HUNK_RE.match(line)
    old_count, new_count = match.group("old_count"), match.group("new_count")
    return int(old_count or 1), int(new_count or 1)


def _split_lines(diff_text: str) -> list[str]:
    lines = diff_text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


@dataclass
class _IndexState:
    """Walk state for one index_diff() call; never shared between calls."""

    positions: PositionMap = field(default_factory=dict)
    current_file: str | None = None
    diff_position: int = 0
    current_new_line: int = 0
    old_remaining: int = 0
    new_remaining: int = 0

    @property
    def in_hunk(self) -> bool:
        return self.old_remaining > 0 or self.new_remaining > 0

    def start_file(self, path: str) -> None:
        self.current_file = path
        self.positions[path] = {}
        self.diff_position = 0
        self.end_hunk()

    def start_hunk(self, new_start: int, old_count: int, new_count: int) -> None:
        self.current_new_line = new_start
        self.old_remaining = old_count
        self.new_remaining = new_count
        self.diff_position += 1

    def end_hunk(self) -> None:
        self.old_remaining = 0
        self.new_remaining = 0

    def record_new_line(self, in_old_file: bool) -> None:
        # Additions and context lines both exist in the new file.
        self.positions[self.current_file][self.current_new_line] = self.diff_position
        self.current_new_line += 1
        self.diff_position += 1
        self.new_remaining -= 1
        if in_old_file:
            self.old_remaining -= 1

    def skip_old_line(self) -> None:
        self.diff_position += 1
        self.old_remaining -= 1


def index_diff(diff_text: str) -> PositionMap:
    """Map every file in a unified diff to {new-file line number: diff position}.

    Files that never get a ``+++ b/<path>`` header are absent from the result.
    Deleted lines advance the position without producing an entry, and the
    ``\\ No newline at end of file`` marker is invisible to both counters.
    """
    state = _IndexState()

    for line in _split_lines(diff_text or ""):
        in_hunk = state.in_hunk
        kind = classify_line(line, in_hunk=in_hunk)
        if in_hunk and _classify_hunk_body(line) is None:
            # The hunk was shorter than its header claimed.
            state.end_hunk()

        if kind is LineKind.FILE_HEADER:
            state.start_file(line[len(FILE_HEADER_PREFIX) :])
            continue

        if state.current_file is None:
            # Preamble before the first file header.
            continue

        if kind is LineKind.HUNK_HEADER:
            state.start_hunk(parse_hunk_header(line), *_hunk_counts(line))
        elif kind is LineKind.ADDED:
            state.record_new_line(in_old_file=False)
        elif kind is LineKind.CONTEXT:
            state.record_new_line(in_old_file=True)
        elif kind is LineKind.REMOVED:
            state.skip_old_line()
        # NO_NEWLINE and IGNORABLE leave the walk untouched.

    return state.positions
