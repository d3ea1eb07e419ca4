"""Unified-diff parsing and comment chain reconstruction.

GitHub reports each changed file with a ``patch`` holding only the hunks,
no ``---``/``+++`` file headers. Every hunk starts with a header such as
``@@ -10,7 +12,9 @@ def foo():`` and the new-file line cursor starts at the
``+`` side's start value. Added and context lines advance the cursor;
removed lines do not, since they have no line number in the new file.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from presubmit_core.models import CommentChain, File, FileDiff, Hunk, ReviewComment

logger = logging.getLogger(__name__)

# Lengths are optional in unified diff: "@@ -3 +3 @@" means a one-line range.
HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,\d+)? \+(\d+)(?:,\d+)? @@")


def split_diff_lines(text: str) -> list[str]:
    """Split patch text on line feeds only.

    ``str.splitlines`` also breaks on form feeds, U+2028 and other separators
    that can sit inside a single source line.
    """
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _advances_new_file(line: str) -> bool:
    # "\ No newline at end of file" annotates the previous line; it is not a line itself.
    return not line.startswith("-") and not line.startswith("\\")


def parse_hunks(patch: str | None) -> list[Hunk]:
    """Split a patch into hunks with inclusive new-file line ranges."""
    if not patch:
        return []

    hunks: list[Hunk] = []
    current: Hunk | None = None
    new_lines = 0

    for line in split_diff_lines(patch):
        header = HUNK_HEADER_RE.match(line)
        if header:
            if current is not None:
                current.end_line = current.start_line + new_lines - 1
                hunks.append(current)
            new_start = int(header.group(2))
            current = Hunk(start_line=new_start, end_line=new_start, diff=line + "\n")
            new_lines = 0
            continue
        if current is None:
            # Text before the first header cannot be placed in any hunk.
            continue
        current.diff += line + "\n"
        if _advances_new_file(line):
            new_lines += 1

    if current is not None:
        current.end_line = current.start_line + new_lines - 1
        hunks.append(current)

    return hunks


def _in_hunk(line: int | None, hunk: Hunk) -> bool:
    return line is not None and hunk.start_line <= line <= hunk.end_line


def generate_comment_chains(
    file: File,
    hunk: Hunk,
    review_comments: Iterable[ReviewComment],
) -> list[CommentChain]:
    """Return the comment threads whose root sits inside ``hunk``.

    A root is a non-reply comment on the same path with a non-empty body whose
    ``line`` (and ``start_line`` when set) falls within the hunk. Replies keep
    the order the platform returned them in.
    """
    comments = list(review_comments)
    roots = [
        c
        for c in comments
        if not c.is_reply
        and c.path == file.filename
        and c.body
        and _in_hunk(c.line, hunk)
        and (c.start_line is None or _in_hunk(c.start_line, hunk))
    ]
    return [CommentChain(comments=[root, *(c for c in comments if c.in_reply_to_id == root.id)]) for root in roots]


def parse_file_diff(file: File, review_comments: Iterable[ReviewComment] = ()) -> FileDiff:
    """Parse ``file.patch`` into hunks and bind existing review threads to them.

    Root comments that land outside every hunk (for example on context that
    has since been deleted) are dropped: there is no hunk to attach them to.
    """
    hunks = parse_hunks(file.patch)
    comments = list(review_comments)
    for hunk in hunks:
        hunk.comment_chains = generate_comment_chains(file, hunk, comments)

    if comments:
        bound = sum(len(h.comment_chains) for h in hunks)
        logger.debug("%s: %d hunk(s), %d comment chain(s) bound", file.filename, len(hunks), bound)

    return FileDiff(file=file, hunks=hunks)
