"""Markdown bodies for the PR overview comment."""

from __future__ import annotations

from collections.abc import Iterable

from presubmit_core.models import Commit, FileDiff
from presubmit_core.prompts import PullRequestSummary
from presubmit_core.state import OVERVIEW_MESSAGE_SIGNATURE, encode_payload

SIGNATURE = "--- \n_autogenerated by presubmit.ai_"

_STATUS_ICONS = {"added": "➕", "removed": "➖", "renamed": "📝"}


def _escape_cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def build_loading_message(
    repo_full_name: str,
    base_sha: str,
    commits: list[Commit],
    file_diffs: list[FileDiff],
    reviewed_commits: Iterable[str] = (),
) -> str:
    """Placeholder shown while the summary and review are generated.

    It replaces the overview body, so it re-emits the commits already reviewed:
    a run that fails before the walkthrough is written keeps the prior state.
    """
    message = "⏳ **Analyzing changes in this PR...** ⏳\n\n"
    message += "_This might take a few minutes, please wait_\n\n"

    message += "<details>\n<summary>📥 Commits</summary>\n\n"
    if commits:
        message += (
            f"Analyzing changes from base (`{base_sha[:7]}`) " f"to latest commit (`{commits[-1].sha[:7]}`):\n"
        )
        for commit in reversed(commits):
            title = commit.message.splitlines()[0] if commit.message else ""
            message += f"- [{commit.sha[:7]}](https://github.com/{repo_full_name}/commit/{commit.sha}): {title}\n"
    else:
        message += "No new commits since the last review.\n"
    message += "\n\n</details>\n\n"

    message += f"<details>\n<summary>📁 Files being considered ({len(file_diffs)})</summary>\n\n"
    for diff in file_diffs:
        text = f"{_STATUS_ICONS.get(diff.status, '🔄')} {diff.filename}"
        if diff.status == "renamed" and diff.previous_filename:
            text += f" (from {diff.previous_filename})"
        count = len(diff.hunks)
        text += f" _({count} {'hunk' if count == 1 else 'hunks'})_"
        message += f"{text}\n"
    message += "\n</details>\n\n"

    message += SIGNATURE
    message += OVERVIEW_MESSAGE_SIGNATURE
    message += encode_payload(reviewed_commits)
    return message


def build_walkthrough_message(summary: PullRequestSummary | None, commits: list[str]) -> str:
    """Final overview body. Always ends with the marker and the commits payload."""
    message = "# 📖 Walkthrough\n\n"

    if summary is None:
        message += "_Pull request summary is disabled._\n\n"
    else:
        message += f"{summary.description.strip()}\n\n"
        if summary.type:
            message += " ".join(f"`{t}`" for t in summary.type) + "\n\n"
        message += "## Changes\n\n"
        message += "| File | Summary |\n"
        message += "|:----------|:---------------|\n"
        for file in summary.files:
            message += f"| `{_escape_cell(file.filename)}` | {_escape_cell(file.summary)} |\n"
        message += "\n"

    message += SIGNATURE
    message += OVERVIEW_MESSAGE_SIGNATURE
    message += encode_payload(commits)
    return message
