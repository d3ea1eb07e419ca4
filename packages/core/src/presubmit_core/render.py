"""Render parsed diffs as prompt text.

Each hunk is shown twice: a ``__new hunk__`` view with removed lines dropped
and every remaining line prefixed with its new-file line number, and an
``__old hunk__`` view with added lines dropped. The line numbers let the
model anchor comments precisely; they are presentation only and are not part
of the diff itself.
"""

from __future__ import annotations

import re

from presubmit_core.diff import split_diff_lines
from presubmit_core.models import File, FileDiff, Hunk

EMPTY_HUNK_PLACEHOLDER = "No changes in this hunk"

_LINE_NUMBER_RE = re.compile(r"^\d+ ")


def _body_lines(hunk: Hunk) -> tuple[str | None, list[str]]:
    lines = split_diff_lines(hunk.diff)
    header = next((line for line in lines if line.startswith("@@")), None)
    return header, [line for line in lines if not line.startswith("@@")]


def old_view(hunk: Hunk) -> list[str]:
    _, body = _body_lines(hunk)
    return [line for line in body if not line.startswith("+")]


def new_view(hunk: Hunk) -> list[str]:
    """Return the hunk's non-removed lines, numbered from ``hunk.start_line``."""
    _, body = _body_lines(hunk)
    numbered = []
    current = hunk.start_line
    for line in body:
        if line.startswith("-"):
            continue
        if line.startswith("\\"):
            numbered.append(line)
            continue
        numbered.append(f"{current} {line}")
        current += 1
    return numbered


def strip_line_numbers(lines: list[str]) -> list[str]:
    return [_LINE_NUMBER_RE.sub("", line, count=1) for line in lines]


def _has_content(lines: list[str]) -> bool:
    return any(line.strip() for line in lines)


def format_hunk(hunk: Hunk) -> str:
    header, _ = _body_lines(hunk)
    old_lines = old_view(hunk)
    new_lines = new_view(hunk)
    has_old = _has_content(old_lines)
    has_new = _has_content(new_lines)

    output = ""
    if (has_old or has_new) and header:
        output += f"{header}\n"

    if has_new:
        new_content = "\n".join(new_lines).rstrip()
        output += f"__new hunk__\n{new_content}\n"

    if has_old:
        if has_new:
            output += "\n"
        old_content = "\n".join(old_lines).rstrip()
        output += f"__old hunk__\n{old_content}\n"

    if hunk.comment_chains:
        chains = "\n\n".join(
            "\n".join(f"@{c.user_login}: {c.body}" for c in chain.comments) for chain in hunk.comment_chains
        )
        output += f"__comment_chain__\n{chains}\n"

    return output or EMPTY_HUNK_PLACEHOLDER


def file_header(file: File | FileDiff) -> str:
    header = f"## File {file.status}: "
    if file.previous_filename:
        header += f"'{file.previous_filename}' → "
    return header + f"'{file.filename}'"


def generate_file_code_diff(file_diff: FileDiff) -> str:
    """Render every hunk of a file in the dual old/new view."""
    hunks_text = "\n\n".join(format_hunk(hunk) for hunk in file_diff.hunks)
    header = file_header(file_diff)
    if hunks_text:
        header += f"\n\n{hunks_text}"
    return header


def format_file_diff(file: File | FileDiff) -> str:
    """Render a file with its raw patch verbatim, without per-hunk views."""
    header = file_header(file)
    if file.patch:
        header += f"\n\n{file.patch}"
    return header
