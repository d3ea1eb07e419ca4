"""Tests for hunk parsing and comment chain binding."""

import re

from presubmit_core.diff import generate_comment_chains, parse_file_diff, parse_hunks, split_diff_lines
from presubmit_core.models import File, Hunk, ReviewComment

SCENARIO_PATCH = "@@ -1,3 +1,4 @@\n line1\n+added\n line2\n-removed\n line3\n"

TWO_HUNKS = """\
@@ -1,2 +1,3 @@
 context a
+added in hunk 1
 context b
@@ -10,2 +11,3 @@ def foo():
 context c
+added in hunk 2
 context d"""


def make_file(patch=TWO_HUNKS, filename="src/foo.py", status="modified"):
    return File(filename=filename, status=status, patch=patch)


def comment(id, line=None, start_line=None, in_reply_to_id=None, path="src/foo.py", body="note", login="alice"):
    return ReviewComment(
        id=id,
        path=path,
        body=body,
        user_login=login,
        line=line,
        start_line=start_line,
        in_reply_to_id=in_reply_to_id,
    )


class TestParseHunks:
    def test_single_hunk_line_range(self):
        hunks = parse_hunks(SCENARIO_PATCH)
        assert len(hunks) == 1
        assert hunks[0].start_line == 1
        assert hunks[0].end_line == 4

    def test_hunk_diff_keeps_header_and_every_line(self):
        (hunk,) = parse_hunks(SCENARIO_PATCH)
        assert hunk.diff == SCENARIO_PATCH

    def test_multiple_hunks_in_patch_order(self):
        hunks = parse_hunks(TWO_HUNKS)
        assert [(h.start_line, h.end_line) for h in hunks] == [(1, 3), (11, 13)]
        assert hunks[1].diff.startswith("@@ -10,2 +11,3 @@ def foo():\n")
        assert "added in hunk 1" not in hunks[1].diff

    def test_hunk_count_matches_header_count(self):
        patch = TWO_HUNKS + "\n@@ -40,3 +42,2 @@\n x\n-y\n z"
        headers = [line for line in patch.splitlines() if re.match(r"^@@ .* @@", line)]
        assert len(parse_hunks(patch)) == len(headers) == 3

    def test_non_deleted_lines_fill_the_range(self):
        for hunk in parse_hunks(TWO_HUNKS + "\n@@ -40,3 +42,2 @@\n x\n-y\n z"):
            body = hunk.diff.splitlines()[1:]
            kept = [line for line in body if not line.startswith("-")]
            assert hunk.end_line - hunk.start_line + 1 == len(kept)

    def test_removed_lines_do_not_advance(self):
        (hunk,) = parse_hunks("@@ -5,3 +5,1 @@\n-a\n-b\n c")
        assert (hunk.start_line, hunk.end_line) == (5, 5)

    def test_header_without_lengths(self):
        (hunk,) = parse_hunks("@@ -3 +3 @@\n-old\n+new")
        assert (hunk.start_line, hunk.end_line) == (3, 3)

    def test_no_newline_marker_is_not_a_line(self):
        (hunk,) = parse_hunks("@@ -1,1 +1,1 @@\n-old\n\\ No newline at end of file\n+new\n\\ No newline at end of file")
        assert (hunk.start_line, hunk.end_line) == (1, 1)

    def test_empty_patch(self):
        assert parse_hunks("") == []
        assert parse_hunks(None) == []

    def test_patch_without_headers(self):
        assert parse_hunks(" just context\n+and an addition") == []

    def test_hunks_do_not_overlap(self):
        hunks = parse_hunks(TWO_HUNKS)
        assert hunks[0].end_line < hunks[1].start_line


class TestParseFileDiff:
    def test_file_without_patch_has_no_hunks(self):
        diff = parse_file_diff(File(filename="logo.png", status="added"))
        assert diff.hunks == []
        assert diff.filename == "logo.png"

    def test_exposes_file_fields(self):
        diff = parse_file_diff(File(filename="b.py", status="renamed", previous_filename="a.py", patch=TWO_HUNKS))
        assert diff.status == "renamed"
        assert diff.previous_filename == "a.py"
        assert len(diff.hunks) == 2

    def test_binds_comments_to_the_containing_hunk(self):
        diff = parse_file_diff(make_file(), [comment(1, line=12)])
        assert diff.hunks[0].comment_chains == []
        assert [c.comments[0].id for c in diff.hunks[1].comment_chains] == [1]

    def test_comment_outside_every_hunk_is_dropped(self):
        diff = parse_file_diff(make_file(), [comment(1, line=7)])
        assert all(h.comment_chains == [] for h in diff.hunks)

    def test_comment_never_lands_in_two_chains(self):
        comments = [comment(i, line=line) for i, line in enumerate([1, 3, 11, 13, 42], start=1)]
        diff = parse_file_diff(make_file(), comments)
        bound = [c.root.id for h in diff.hunks for c in h.comment_chains]
        assert sorted(bound) == [1, 2, 3, 4]
        assert len(bound) == len(set(bound))


class TestGenerateCommentChains:
    HUNK = Hunk(start_line=10, end_line=20, diff="")

    def test_replies_follow_their_root_in_input_order(self):
        comments = [
            comment(1, line=12),
            comment(3, in_reply_to_id=1, body="second reply"),
            comment(2, line=15),
            comment(4, in_reply_to_id=1, body="third reply"),
            comment(5, in_reply_to_id=2, body="reply to 2"),
        ]
        chains = generate_comment_chains(make_file(), self.HUNK, comments)
        assert [[c.id for c in chain.comments] for chain in chains] == [[1, 3, 4], [2, 5]]

    def test_reply_is_never_a_root(self):
        chains = generate_comment_chains(make_file(), self.HUNK, [comment(7, line=12, in_reply_to_id=99)])
        assert chains == []

    def test_other_path_is_ignored(self):
        chains = generate_comment_chains(make_file(), self.HUNK, [comment(1, line=12, path="src/bar.py")])
        assert chains == []

    def test_empty_body_is_ignored(self):
        chains = generate_comment_chains(make_file(), self.HUNK, [comment(1, line=12, body="")])
        assert chains == []

    def test_comment_without_line_is_ignored(self):
        chains = generate_comment_chains(make_file(), self.HUNK, [comment(1, line=None)])
        assert chains == []

    def test_range_bounds_are_inclusive(self):
        chains = generate_comment_chains(make_file(), self.HUNK, [comment(1, line=10), comment(2, line=20)])
        assert len(chains) == 2

    def test_start_line_must_also_be_inside(self):
        comments = [comment(1, line=12, start_line=8), comment(2, line=14, start_line=11)]
        chains = generate_comment_chains(make_file(), self.HUNK, comments)
        assert [c.root.id for c in chains] == [2]


class TestLineSeparatorsInsideLines:
    def test_form_feed_stays_in_one_line(self):
        hunk = parse_hunks("@@ -1,2 +1,3 @@\n a\n+x = 1\x0c# page\n b\n")[0]
        assert (hunk.start_line, hunk.end_line) == (1, 3)
        assert "+x = 1\x0c# page\n" in hunk.diff

    def test_unicode_line_separator_stays_in_one_line(self):
        hunk = parse_hunks("@@ -1 +1,2 @@\n a\n+s = 'x\u2028y'\n")[0]
        assert hunk.end_line == 2
        assert hunk.diff.endswith("+s = 'x\u2028y'\n")

    def test_split_keeps_trailing_content_without_newline(self):
        assert split_diff_lines("@@ -1 +1 @@\n-a\n+b") == ["@@ -1 +1 @@", "-a", "+b"]
        assert split_diff_lines("@@ -1 +1 @@\n-a\n+b\n") == ["@@ -1 +1 @@", "-a", "+b"]
        assert split_diff_lines("") == []
