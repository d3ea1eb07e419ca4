"""Core PR review orchestration."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from github import GithubException
from rich.console import Console

from presubmit_core.config import load_guidelines
from presubmit_core.diff import parse_file_diff
from presubmit_core.gh.pull_request import (
    create_issue_comment,
    get_incremental_files,
    get_pull,
    get_repo,
    list_commits,
    list_files,
    list_issue_comments,
    list_review_comments,
    update_issue_comment,
    update_title,
)
from presubmit_core.messages import build_loading_message, build_walkthrough_message
from presubmit_core.prompts import AIComment, PullRequestReview, run_review_prompt, run_summary_prompt
from presubmit_core.providers.anthropic import AnthropicProvider
from presubmit_core.providers.base import BaseProvider
from presubmit_core.providers.openai import OpenAIProvider
from presubmit_core.state import (
    ReviewMode,
    find_overview_comment,
    load_review_state,
    merge_commits,
    plan_review,
)
from presubmit_core.submit import format_comment_body, submit_review
from presubmit_core.utils.files import reviewable_files

console = Console()
logger = logging.getLogger(__name__)


@dataclass
class ReviewSummary:
    """Outcome of one run_review invocation, for the CLI to report."""

    repo: str
    pr_number: int
    head_sha: str
    mode: str  # "fresh" | "incremental"
    title: str | None = None
    reviewed_files: list[str] = field(default_factory=list)
    skipped_files: list[str] = field(default_factory=list)
    review_skipped: bool = False
    total_comments: int = 0
    posted_comments: int = 0
    failed_comments: int = 0
    reviewed_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


def _get_provider(config: dict) -> BaseProvider:
    model = config["model"]
    if model == "anthropic":
        return AnthropicProvider(api_key=config["anthropic_api_key"], model=config.get("model_name"))
    if model == "openai":
        return OpenAIProvider(api_key=config["openai_api_key"], model=config.get("model_name"))
    raise ValueError(f"Unknown model provider: {model!r}. Choose 'anthropic' or 'openai'.")


def select_comments(comments: list[AIComment], filenames: set[str]) -> list[AIComment]:
    """Drop empty comments and comments on files that are not part of the PR."""
    kept = []
    for comment in comments:
        if not comment.content.strip():
            continue
        if comment.file not in filenames:
            logger.debug("Dropping comment on %s: not a file in this PR", comment.file)
            continue
        kept.append(comment)
    return kept


def print_shadow_comments(comments: list[AIComment]) -> None:
    """Print review comments to the terminal without posting to GitHub."""
    if not comments:
        console.print("[yellow]Shadow mode: no comments generated.[/yellow]")
        return
    console.print(f"\n[bold]Shadow review — {len(comments)} comment(s) (not posted)[/bold]\n")
    for c in comments:
        if c.end_line is None:
            where = "file"
        elif c.start_line and c.start_line < c.end_line:
            where = f"lines [bold]{c.start_line}-{c.end_line}[/bold]"
        else:
            where = f"line [bold]{c.end_line}[/bold]"
        label = f"  [blue]{c.label}[/blue]" if c.label else ""
        console.print(f"[bold cyan]{c.file}[/bold cyan]  {where}{label}")
        code = c.highlighted_code.strip()
        if code:
            console.print(f"  [dim]{code}[/dim]")
        console.print(f"  {format_comment_body(c)}")
        console.print()


def _print_verdict(review: PullRequestReview) -> None:
    verdict = review.review
    console.print(
        f"[cyan]Effort {verdict.estimated_effort_to_review}/5 · score {verdict.score}/100 · "
        f"tests: {'yes' if verdict.has_relevant_tests else 'no'}[/cyan]"
    )
    if verdict.security_concerns.strip() and verdict.security_concerns.strip().lower() != "no":
        console.print(f"[yellow]Security: {verdict.security_concerns.strip()}[/yellow]")


def run_review(
    repo: str,
    pr_number: int,
    config: dict,
    shadow: bool = False,
    force_full: bool = False,
    repo_obj=None,
) -> ReviewSummary | None:
    """Summarize and review one pull request, incrementally when possible.

    Returns None when the PR is skipped outright (draft). In shadow mode
    nothing is written to GitHub; the walkthrough and comments are printed.
    """
    this_repo = repo_obj if repo_obj is not None else get_repo(repo, token=config["github_token"])

    try:
        this_pr = get_pull(this_repo, pr_number)
    except GithubException:
        raise ValueError(f"PR #{pr_number} not found in {repo}.")

    if this_pr.draft and not config.get("review_draft_prs", False):
        console.print(
            "[yellow]Skipping draft PR. Set review_draft_prs: true in .presubmit.yml to review drafts.[/yellow]"
        )
        return None

    guidelines = load_guidelines(config)
    head_sha = this_pr.head.sha
    pr_title = this_pr.title or ""
    pr_body = this_pr.body or ""

    commits = list_commits(this_pr)
    console.print(f"Fetched {len(commits)} commit(s).")

    overview = find_overview_comment(list_issue_comments(this_pr))
    state = load_review_state(overview)
    review_comments = list_review_comments(this_pr) if overview is not None else []

    files = list_files(this_pr)
    file_diffs = [parse_file_diff(f, review_comments) for f in files]
    console.print(f"Fetched {len(file_diffs)} changed file(s).")

    result = ReviewSummary(repo=repo, pr_number=pr_number, head_sha=head_sha, mode=state.mode.value)

    if state.mode is ReviewMode.INCREMENTAL:
        console.print(f"[cyan]Running incremental review ({len(state.commits)} commit(s) already reviewed)[/cyan]")
    else:
        console.print("[cyan]Running full review[/cyan]")

    if not shadow:
        if overview is not None:
            new_commits = [c for c in commits if c.sha not in state.commits]
            base_sha = state.last_reviewed_sha or this_pr.base.sha
            update_issue_comment(
                overview, build_loading_message(this_repo.full_name, base_sha, new_commits, file_diffs, state.commits)
            )
            logger.info("Updated existing overview comment %s", overview.id)
        else:
            overview = create_issue_comment(
                this_pr, build_loading_message(this_repo.full_name, this_pr.base.sha, commits, file_diffs)
            )
            logger.info("Posted new overview loading comment")

    provider = None
    if config.get("enable_pr_summary", True) or config.get("enable_code_review", True):
        provider = _get_provider(config)

    summary = None
    if config.get("enable_pr_summary", True):
        summary = run_summary_prompt(provider, pr_title, pr_body, [c.message for c in commits], file_diffs)
        result.title = summary.title
        console.print(f"Generated pull request summary: [bold]{summary.title}[/bold]")

        trigger = config.get("title_trigger") or ""
        if config.get("enable_title_generation", True) and trigger and trigger in pr_title:
            if shadow:
                console.print(f"[dim]Would retitle PR to: {summary.title}[/dim]")
            else:
                update_title(this_pr, summary.title)
                console.print(f"Title contains {trigger}, updated it to: {summary.title}")

    walkthrough = build_walkthrough_message(summary, merge_commits(state.commits, [c.sha for c in commits]))
    if shadow:
        console.print(walkthrough)
    else:
        update_issue_comment(overview, walkthrough)
        logger.info("Updated overview comment with walkthrough")

    if not config.get("enable_code_review", True):
        return result

    plan = plan_review(
        state,
        head_sha,
        file_diffs,
        compare=lambda base, head: get_incremental_files(this_repo, base, head),
        force_full=force_full,
    )
    if plan.skip:
        console.print("[yellow]No new commits since the last review. Skipping code review.[/yellow]")
        result.review_skipped = True
        return result
    if plan.incremental:
        console.print(
            f"[cyan]Incremental review: {plan.base_sha[:7]} → {head_sha[:7]} "
            f"({len(plan.files)} file(s) changed)[/cyan]"
        )

    to_review, skipped = reviewable_files(plan.files, config.get("exclude") or [])
    result.skipped_files = skipped
    for name in skipped:
        console.print(f"  Skipping: {name}")
    if not to_review:
        console.print("[yellow]No reviewable files in this round.[/yellow]")
        result.review_skipped = True
        return result

    result.reviewed_files = [f.filename for f in to_review]
    review = run_review_prompt(
        provider,
        pr_title,
        pr_body,
        summary.description if summary else "",
        to_review,
        guidelines=guidelines,
    )
    _print_verdict(review)

    comments = select_comments(review.comments, {f.filename for f in files})
    result.total_comments = len(comments)

    if shadow:
        print_shadow_comments(comments)
        console.print(f"[bold]Shadow review complete. {len(comments)} comment(s) would be posted.[/bold]")
        return result

    submission = submit_review(this_repo, this_pr, head_sha, comments)
    result.posted_comments = submission.posted
    result.failed_comments = submission.failed
    console.print(
        f"\n[green]Posted {submission.posted} comment(s) across {len(to_review)} file(s).[/green]"
        + (f" [yellow]{submission.failed} could not be posted.[/yellow]" if submission.failed else "")
    )
    return result
