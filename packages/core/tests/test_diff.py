"""Tests for diff position indexing — critical for correct GitHub comment placement."""

import pytest

from sherlockqa_core.diff import LineKind, classify_line, index_diff, parse_hunk_header

SINGLE_FILE = """\
diff --git a/a.py b/a.py
index 83db48f..bf269f4 100644
--- a/a.py
+++ b/a.py
@@ -1,2 +1,3 @@
 ctx1
+added
 ctx2"""


class TestClassifyLine:
    @pytest.mark.parametrize(
        "line, kind",
        [
            ("+++ b/src/app.py", LineKind.FILE_HEADER),
            ("@@ -1,2 +1,3 @@", LineKind.HUNK_HEADER),
            ("@@ -10 +12 @@ def handler():", LineKind.HUNK_HEADER),
            ("+new code", LineKind.ADDED),
            ("+", LineKind.ADDED),
            ("-old code", LineKind.REMOVED),
            ("\\ No newline at end of file", LineKind.NO_NEWLINE),
            (" unchanged", LineKind.CONTEXT),
            ("", LineKind.CONTEXT),
            ("diff --git a/x b/x", LineKind.IGNORABLE),
            ("index 83db48f..bf269f4 100644", LineKind.IGNORABLE),
            ("--- a/x", LineKind.IGNORABLE),
            ("+++ /dev/null", LineKind.IGNORABLE),
            ("new file mode 100644", LineKind.IGNORABLE),
        ],
    )
    def test_classifies(self, line, kind):
        assert classify_line(line) is kind

    def test_malformed_hunk_header_is_not_a_hunk(self):
        assert classify_line("@@ bad header @@") is LineKind.CONTEXT


class TestParseHunkHeader:
    def test_returns_new_start(self):
        assert parse_hunk_header("@@ -10,7 +12,9 @@ class Foo:") == 12

    def test_counts_are_optional(self):
        assert parse_hunk_header("@@ -1 +1 @@") == 1

    def test_returns_none_for_other_lines(self):
        assert parse_hunk_header(" context") is None


class TestIndexDiff:
    def test_single_hunk_positions(self):
        # GitHub numbering: the first line below the first @@ header is position 1.
        assert index_diff(SINGLE_FILE) == {"a.py": {1: 1, 2: 2, 3: 3}}

    def test_position_is_cumulative_across_hunks(self):
        """diff_position must NOT reset between hunks — GitHub API requires cumulative positions."""
        diff = """\
+++ b/a.py
@@ -1,2 +1,3 @@
 context a
+added in hunk 1
 context b
@@ -10,2 +11,3 @@
 context c
+added in hunk 2
 context d"""
        positions = index_diff(diff)["a.py"]
        assert positions[1] == 1
        assert positions[2] == 2
        assert positions[3] == 3
        # The second @@ header itself occupies position 4.
        assert positions[11] == 5
        assert positions[12] == 6
        assert positions[13] == 7

    def test_removed_lines_advance_position_only(self):
        diff = """\
+++ b/a.py
@@ -1,3 +1,2 @@
 context
-removed line
+added line"""
        positions = index_diff(diff)["a.py"]
        # " context" → line 1, "-removed" consumes a position, "+added" → line 2
        assert positions == {1: 1, 2: 3}

    def test_no_newline_marker_is_invisible(self):
        diff = """\
+++ b/a.py
@@ -1 +1 @@
-old
\\ No newline at end of file
+new
\\ No newline at end of file"""
        # "-old" sits at position 1; neither marker consumes a position.
        assert index_diff(diff) == {"a.py": {1: 2}}

    def test_position_resets_per_file(self):
        diff = (
            SINGLE_FILE
            + """
diff --git a/b.py b/b.py
--- a/b.py
+++ b/b.py
@@ -5,2 +5,3 @@
 five
+six
 seven"""
        )
        positions = index_diff(diff)
        assert positions["a.py"] == {1: 1, 2: 2, 3: 3}
        assert positions["b.py"] == {5: 1, 6: 2, 7: 3}

    def test_extended_headers_do_not_leak_into_previous_file(self):
        diff = SINGLE_FILE + "\ndiff --git a/b.py b/b.py\nindex 1..2 100644\n--- a/b.py\n+++ b/b.py\n"
        assert index_diff(diff)["a.py"] == {1: 1, 2: 2, 3: 3}
        assert index_diff(diff)["b.py"] == {}

    def test_preamble_before_first_file_is_skipped(self):
        diff = "From 1234 Mon Sep 17 00:00:00 2001\nSubject: fix\n\n+not a file yet\n" + SINGLE_FILE
        assert index_diff(diff) == {"a.py": {1: 1, 2: 2, 3: 3}}

    def test_files_without_header_are_absent(self):
        assert index_diff("@@ -1 +1 @@\n+orphan") == {}

    def test_empty_diff(self):
        assert index_diff("") == {}

    def test_none_is_treated_as_empty(self):
        assert index_diff(None) == {}

    def test_new_file(self):
        diff = """\
diff --git a/new.py b/new.py
new file mode 100644
--- /dev/null
+++ b/new.py
@@ -0,0 +1,2 @@
+first
+second"""
        assert index_diff(diff) == {"new.py": {1: 1, 2: 2}}

    def test_deleted_only_hunk_has_no_entries(self):
        diff = "+++ b/a.py\n@@ -1,2 +0,0 @@\n-one\n-two"
        assert index_diff(diff) == {"a.py": {}}

    def test_malformed_lines_do_not_raise(self):
        diff = "+++ b/a.py\n@@ garbage @@\n+x\n@@@@\n"
        positions = index_diff(diff)
        assert "a.py" in positions

    def test_is_idempotent(self):
        assert index_diff(SINGLE_FILE) == index_diff(SINGLE_FILE)

    def test_positions_increase_with_line_number_within_a_hunk(self):
        diff = "+++ b/a.py\n@@ -1,4 +1,5 @@\n one\n+two\n-gone\n three\n+four\n five"
        positions = index_diff(diff)["a.py"]
        lines = sorted(positions)
        assert lines == [1, 2, 3, 4, 5]
        assert [positions[n] for n in lines] == sorted(positions.values())

    def test_form_feed_inside_a_line_is_not_a_line_break(self):
        diff = "+++ b/a.c\n@@ -1,2 +1,3 @@\n \x0c\n+added\n ctx"
        assert index_diff(diff) == {"a.c": {1: 1, 2: 2, 3: 3}}

    def test_unicode_separators_are_not_line_breaks(self):
        diff = "+++ b/data.js\n@@ -1,2 +1,2 @@\n-const s = 'a\u2028b';\n+const s = 'a\u2029b';\n ctx"
        assert index_diff(diff) == {"data.js": {1: 2, 2: 3}}

    def test_crlf_line_endings(self):
        diff = SINGLE_FILE.replace("\n", "\r\n") + "\r\n"
        assert index_diff(diff) == {"a.py": {1: 1, 2: 2, 3: 3}}

    def test_removed_sql_comment_counts_as_removed_line(self):
        # "-- old note" removed from the file shows up as "--- old note" in the diff.
        diff = "+++ b/q.sql\n@@ -1,3 +1,2 @@\n select 1;\n--- old note\n select 2;"
        assert index_diff(diff) == {"q.sql": {1: 1, 2: 3}}

    def test_added_line_starting_with_plus_plus_inside_hunk(self):
        diff = "+++ b/a.c\n@@ -1 +1,2 @@\n i = 0;\n+++ b/counter;"
        assert index_diff(diff) == {"a.c": {1: 1, 2: 2}}

    def test_headers_after_an_exhausted_hunk_start_the_next_file(self):
        diff = (
            "+++ b/q.sql\n@@ -1,2 +1,1 @@\n select 1;\n--- old note\n"
            "diff --git a/b.sql b/b.sql\n--- a/b.sql\n+++ b/b.sql\n@@ -1 +1 @@\n-x\n+y"
        )
        positions = index_diff(diff)
        assert positions["q.sql"] == {1: 1}
        assert positions["b.sql"] == {1: 3}

    def test_hunk_shorter_than_its_header_ends_at_next_header(self):
        diff = (
            SINGLE_FILE.replace("@@ -1,2 +1,3 @@", "@@ -1,9 +1,9 @@")
            + "\ndiff --git a/b.py b/b.py\n--- a/b.py\n+++ b/b.py\n@@ -1 +1 @@\n ok"
        )
        positions = index_diff(diff)
        assert positions["a.py"] == {1: 1, 2: 2, 3: 3}
        assert positions["b.py"] == {1: 1}


class TestClassifyLineInHunk:
    @pytest.mark.parametrize(
        "line, kind",
        [
            ("--- old note", LineKind.REMOVED),
            ("+++ b/counter", LineKind.ADDED),
            ("-- index 1", LineKind.REMOVED),
            (" index 83db48f", LineKind.CONTEXT),
            ("", LineKind.CONTEXT),
            ("\\ No newline at end of file", LineKind.NO_NEWLINE),
            ("diff --git a/x b/x", LineKind.IGNORABLE),
        ],
    )
    def test_classifies_by_first_character(self, line, kind):
        assert classify_line(line, in_hunk=True) is kind
