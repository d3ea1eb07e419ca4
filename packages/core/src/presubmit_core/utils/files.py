"""Decide which changed files are worth sending to the review prompt."""

from __future__ import annotations

import fnmatch
import logging

from presubmit_core.models import FileDiff

logger = logging.getLogger(__name__)

NON_CODE_EXTENSIONS = frozenset(
    {
        # images
        ".png", ".jpg", ".jpeg", ".gif", ".svg", ".ico", ".webp", ".bmp",
        # documents and fonts
        ".pdf", ".woff", ".woff2", ".ttf", ".eot", ".otf",
        # media
        ".mp4", ".mp3", ".wav", ".ogg",
        # archives
        ".zip", ".tar", ".gz", ".rar", ".7z",
        # generated lockfiles, e.g. poetry.lock, Pipfile.lock
        ".lock",
    }
)  # fmt: skip


def is_code_file(filename: str) -> bool:
    return not any(filename.lower().endswith(ext) for ext in NON_CODE_EXTENSIONS)


def is_excluded(filename: str, patterns: list[str]) -> bool:
    """Return True if filename matches any exclude pattern.

    Supports:
    - fnmatch globs on the full path: "src/generated/*.py"
    - fnmatch globs on the basename: "*.lock", "*.min.js"
    - Directory names/prefixes: "migrations/", "tests" (matches any file within that tree)
    """
    basename = filename.rsplit("/", 1)[-1]
    for pattern in patterns:
        if fnmatch.fnmatch(filename, pattern) or fnmatch.fnmatch(basename, pattern):
            return True
        prefix = pattern.rstrip("/") + "/"
        if filename.startswith(prefix) or ("/" + prefix) in filename:
            return True
    return False


def reviewable_files(file_diffs: list[FileDiff], exclude: list[str]) -> tuple[list[FileDiff], list[str]]:
    """Split ``file_diffs`` into files to review and the names of skipped ones.

    Removed files, binaries and anything without hunks have nothing to
    anchor a line comment on.
    """
    keep: list[FileDiff] = []
    skipped: list[str] = []
    for diff in file_diffs:
        if diff.status == "removed" or not diff.hunks:
            skipped.append(diff.filename)
        elif is_excluded(diff.filename, exclude) or not is_code_file(diff.filename):
            skipped.append(diff.filename)
        else:
            keep.append(diff)
    if skipped:
        logger.debug("Skipping %d file(s): %s", len(skipped), ", ".join(skipped))
    return keep, skipped
