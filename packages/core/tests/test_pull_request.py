"""Tests for GitHub pull request helper functions."""

import types
from unittest.mock import MagicMock

from sherlockqa_core.diff import index_diff
from sherlockqa_core.gh.pull_request import DISMISS_MESSAGE, build_unified_diff, dismiss_review, list_reviews


def _file(filename, status="modified", patch="@@ -1,2 +1,3 @@\n one\n+two\n three", previous_filename=None):
    return types.SimpleNamespace(filename=filename, status=status, patch=patch, previous_filename=previous_filename)


class TestBuildUnifiedDiff:
    def test_adds_file_headers(self):
        diff = build_unified_diff([_file("src/a.py")])
        assert diff.splitlines()[:4] == [
            "diff --git a/src/a.py b/src/a.py",
            "--- a/src/a.py",
            "+++ b/src/a.py",
            "@@ -1,2 +1,3 @@",
        ]

    def test_added_and_removed_files(self):
        diff = build_unified_diff(
            [
                _file("new.py", status="added", patch="@@ -0,0 +1 @@\n+x"),
                _file("old.py", status="removed", patch="@@ -1 +0,0 @@\n-x"),
            ]
        )
        assert "--- /dev/null\n+++ b/new.py" in diff
        assert "--- a/old.py\n+++ /dev/null" in diff

    def test_renamed_file_uses_previous_name(self):
        diff = build_unified_diff([_file("new_name.py", status="renamed", previous_filename="old_name.py")])
        assert "diff --git a/old_name.py b/new_name.py" in diff
        assert "--- a/old_name.py" in diff

    def test_binary_file_without_patch(self):
        diff = build_unified_diff([_file("logo.png", patch=None)])
        assert diff == "diff --git a/logo.png b/logo.png\n--- a/logo.png\n+++ b/logo.png\n"

    def test_no_files(self):
        assert build_unified_diff([]) == ""

    def test_positions_restart_per_file(self):
        diff = build_unified_diff([_file("a.py"), _file("b.py")])
        assert index_diff(diff) == {"a.py": {1: 1, 2: 2, 3: 3}, "b.py": {1: 1, 2: 2, 3: 3}}


def test_list_reviews_delegates_to_pr():
    pr = MagicMock()
    pr.get_reviews.return_value = ["r1"]
    assert list_reviews(pr) == ["r1"]


def test_dismiss_review_uses_update_message():
    review = MagicMock()
    dismiss_review(review)
    review.dismiss.assert_called_once_with(DISMISS_MESSAGE)
