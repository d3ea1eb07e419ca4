"""review command: summarize and review a pull request."""

from __future__ import annotations

import click
from rich.console import Console

from presubmit_core.gh.pull_request import get_pull_requests, get_repo
from presubmit_core.reviewer import ReviewSummary, run_review

console = Console()


def check_credentials(config: dict) -> None:
    """Raise a UsageError for any credential the configured run needs but lacks."""
    if not config.get("github_token"):
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )
    if not (config.get("enable_pr_summary", True) or config.get("enable_code_review", True)):
        return
    if config["model"] == "anthropic" and not config.get("anthropic_api_key"):
        raise click.UsageError("ANTHROPIC_API_KEY environment variable is not set.")
    if config["model"] == "openai" and not config.get("openai_api_key"):
        raise click.UsageError("OPENAI_API_KEY environment variable is not set.")


def report(summary: ReviewSummary | None) -> None:
    if summary is None:
        return
    if summary.review_skipped:
        console.print(f"[bold]#{summary.pr_number}[/bold] summary refreshed; code review skipped.")
        return
    console.print(
        f"[bold]#{summary.pr_number}[/bold] {summary.mode} review: "
        f"{len(summary.reviewed_files)} file(s) reviewed, {summary.total_comments} comment(s)"
        + (f", {summary.failed_comments} failed to post" if summary.failed_comments else "")
    )


def execute_review(
    config: dict,
    repo: str,
    pr_number: int,
    shadow: bool = False,
    force_full: bool = False,
    repo_obj=None,
) -> ReviewSummary | None:
    """Run one review and turn any escaping error into a single CLI failure.

    Comments posted before the failure stay posted; nothing is rolled back.
    """
    try:
        summary = run_review(
            repo=repo,
            pr_number=pr_number,
            config=config,
            shadow=shadow,
            force_full=force_full,
            repo_obj=repo_obj,
        )
    except Exception as e:
        raise click.ClickException(f"Failed with error: {e}") from e
    report(summary)
    return summary


@click.command("review")
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option(
    "--pr",
    "pr_number",
    type=int,
    default=None,
    help="Pull request number. Omit to list open PRs interactively.",
)
@click.option(
    "--model",
    type=click.Choice(["anthropic", "openai"]),
    default=None,
    help="AI model provider. Overrides config file.",
)
@click.option(
    "--guidelines",
    "guidelines_path",
    default=None,
    help="Path to a Markdown guidelines file. Overrides config file.",
)
@click.option(
    "--shadow",
    "-s",
    is_flag=True,
    help="Dry-run mode: print the walkthrough and comments without writing to GitHub.",
)
@click.option(
    "--full-review",
    "full_review",
    is_flag=True,
    help="Review all changed files even if a previous review exists.",
)
@click.pass_context
def review_cmd(
    ctx,
    repo: str,
    pr_number: int | None,
    model: str | None,
    guidelines_path: str | None,
    shadow: bool,
    full_review: bool,
):
    """Summarize a pull request and review what changed since the last run.

    \b
    Required environment variables:
      GITHUB_TOKEN         GitHub personal access token (or use gh CLI)
      ANTHROPIC_API_KEY    Required when using --model anthropic
      OPENAI_API_KEY       Required when using --model openai
    """
    config = dict(ctx.obj["config"])
    for key, value in {"model": model, "guidelines": guidelines_path}.items():
        if value is not None:
            config[key] = value

    check_credentials(config)
    this_repo = get_repo(repo, token=config["github_token"])

    if pr_number is None:
        prs = list(get_pull_requests(this_repo))
        if not prs:
            console.print("[yellow]No open pull requests found.[/yellow]")
            return
        console.print("\nOpen pull requests:")
        for pr in prs:
            console.print(f"  [bold]#{pr.number}[/bold]  {pr.title}")
        pr_number = click.prompt("\nEnter the pull request number", type=int)

    execute_review(config, repo, pr_number, shadow=shadow, force_full=full_review, repo_obj=this_repo)
