from __future__ import annotations

import logging

from github import Auth, Github

from presubmit_core.gh.retry import ReviewSafeRetry
from presubmit_core.models import Commit, File, ReviewComment

logger = logging.getLogger(__name__)


def get_client(token: str) -> Github:
    return Github(auth=Auth.Token(token), retry=ReviewSafeRetry())


def get_repo(repo_name: str, token: str):
    return get_client(token).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def get_pull_requests(repo, state: str = "open"):
    return repo.get_pulls(state=state)


def list_files(pr) -> list[File]:
    """Return the PR's changed files, following pagination."""
    return [File.from_github(f) for f in pr.get_files()]


def list_commits(pr) -> list[Commit]:
    return [Commit.from_github(c) for c in pr.get_commits()]


def list_issue_comments(pr) -> list:
    return list(pr.get_issue_comments())


def list_review_comments(pr) -> list[ReviewComment]:
    """Return the PR's review comments, dropping records that cannot be parsed."""
    comments = []
    for raw in pr.get_review_comments():
        try:
            comments.append(ReviewComment.from_github(raw))
        except (TypeError, ValueError) as e:
            logger.warning("Skipping malformed review comment: %s", e)
    return comments


def get_incremental_files(repo, base_sha: str, head_sha: str) -> list[str]:
    """Return filenames changed between two commits using GitHub's compare API."""
    comparison = repo.compare(base_sha, head_sha)
    return [f.filename for f in comparison.files]


def create_issue_comment(pr, body: str):
    return pr.create_issue_comment(body)


def update_issue_comment(comment, body: str) -> None:
    comment.edit(body)


def update_title(pr, title: str) -> None:
    pr.edit(title=title)
