"""Prompt text and response schemas for the summary and review calls.

The schemas double as the contract with the model: providers append
``model_json_schema()`` to the system prompt and validate the reply against
the same class, so whatever reaches the rest of the engine is well-formed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, Field

from presubmit_core.render import format_file_diff, generate_file_code_diff

if TYPE_CHECKING:
    from presubmit_core.models import FileDiff
    from presubmit_core.providers.base import BaseProvider


class FileSummary(BaseModel):
    filename: str = Field(description="The full file path of the relevant file")
    summary: str = Field(description="Concise summary of the file changes in markdown format (max 70 words)")
    title: str = Field(
        description="An informative title for the changes in this file, describing its main theme (5-10 words)."
    )


class PullRequestSummary(BaseModel):
    title: str = Field(description="Informative title of the PR, describing its main theme (10 words max)")
    description: str = Field(description="Informative description of the PR, describing its main theme")
    files: list[FileSummary] = Field(
        default_factory=list,
        description="List of files affected in the PR and summaries of their changes",
    )
    type: list[Literal["BUG", "TESTS", "ENHANCEMENT", "DOCUMENTATION", "OTHER"]] = Field(
        default_factory=list,
        description="One or more types that describe this PR's main theme.",
    )


class AIComment(BaseModel):
    file: str = Field(description="The full file path of the file the comment is about")
    start_line: int | None = Field(
        default=None, description="First line of the commented range, taken from the __new hunk__ line numbers"
    )
    end_line: int | None = Field(
        default=None,
        description="Last line of the commented range. Leave empty for a comment about the whole file",
    )
    highlighted_code: str = Field(default="", description="The exact code the comment refers to")
    header: str = Field(default="", description="A one-line headline for the comment")
    content: str = Field(description="The comment itself, in GitHub-flavored markdown")
    label: str = Field(default="", description="A single lowercase label, e.g. bug, security, performance, style")


class ReviewVerdict(BaseModel):
    estimated_effort_to_review: int = Field(
        ge=1, le=5, description="Estimated effort to review the PR, from 1 (trivial) to 5 (very hard)"
    )
    score: int = Field(ge=0, le=100, description="Overall quality of the PR, from 0 to 100")
    has_relevant_tests: bool = Field(description="Whether the PR adds or updates tests covering the change")
    security_concerns: str = Field(description="Security issues introduced by the PR, or 'No' if there are none")


class PullRequestReview(BaseModel):
    review: ReviewVerdict
    comments: list[AIComment] = Field(default_factory=list)


SUMMARY_SYSTEM_PROMPT = """You are a helpful assistant that summarizes Git Pull Requests (PRs).
Your task is to provide a full description for the PR content - title, type, description and affected file summaries.

- Keep in mind that the 'Original title', 'Original description' and 'Commit messages' sections may be partial, \
simplistic, non-informative or out of date. Hence, compare them to the PR diff code, and use them only as a reference.
- The generated title and description should prioritize the most significant changes.
- When quoting variables or names from the code, use backticks (`).
- Return a summary for each single affected file or "no summary" if there is nothing to summarize."""

REVIEW_SYSTEM_PROMPT = """You are a strict and precise senior code reviewer reviewing a Git Pull Request (PR).

The diff of each file is split into hunks. Every hunk is shown as:
- '__new hunk__': the code after the change. Each line is prefixed with its line number in the new file,
  followed by '+' for added lines or ' ' for unchanged lines.
- '__old hunk__': the code before the change. '-' marks removed lines.
- '__comment_chain__' (optional): existing review discussion on that hunk, as '@author: comment' lines.

Rules:
- Only comment on added lines ('+') of the new hunks, or on the implications of removed lines.
- Use the line numbers from '__new hunk__' for start_line and end_line.
- Do not repeat points already raised in a comment chain unless the new code still has the problem.
- Do not comment on code that already follows best practices. Be concise and actionable.
- Return an empty comment list if there is nothing worth saying."""


def build_summary_prompt(
    pr_title: str,
    pr_description: str,
    commit_messages: list[str],
    files: list[FileDiff],
) -> str:
    affected = "\n".join(f"- {f.status}: {f.filename}" for f in files)
    diffs = "\n\n".join(format_file_diff(f) for f in files)
    commits = "\n".join(commit_messages)
    return f"""
Summarize the following PR:

<Original PR Title>{pr_title}</Original PR Title>
<Original PR Description>
{pr_description}
</Original PR Description>
<Commit Messages>
{commits}
</Commit Messages>

<Affected Files>
{affected}
</Affected Files>

<File Diffs>
{diffs}
</File Diffs>

Make sure each affected file is summarized and it's part of the returned JSON.
"""


def build_review_prompt(
    pr_title: str,
    pr_description: str,
    pr_summary: str,
    files: list[FileDiff],
) -> str:
    diffs = "\n\n".join(generate_file_code_diff(f) for f in files)
    return f"""
Review the following PR:

<PR Title>{pr_title}</PR Title>
<PR Description>
{pr_description}
</PR Description>
<PR Summary>
{pr_summary}
</PR Summary>

<PR File Diffs>
{diffs}
</PR File Diffs>
"""


def run_summary_prompt(
    provider: BaseProvider,
    pr_title: str,
    pr_description: str,
    commit_messages: list[str],
    files: list[FileDiff],
) -> PullRequestSummary:
    prompt = build_summary_prompt(pr_title, pr_description, commit_messages, files)
    return provider.generate(prompt, SUMMARY_SYSTEM_PROMPT, PullRequestSummary)


def run_review_prompt(
    provider: BaseProvider,
    pr_title: str,
    pr_description: str,
    pr_summary: str,
    files: list[FileDiff],
    guidelines: str = "",
) -> PullRequestReview:
    system = REVIEW_SYSTEM_PROMPT
    if guidelines.strip():
        system += f"\n\nTeam guidelines:\n{guidelines.strip()}"
    prompt = build_review_prompt(pr_title, pr_description, pr_summary, files)
    return provider.generate(prompt, system, PullRequestReview)
