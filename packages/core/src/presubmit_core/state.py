"""Incremental review state, persisted inside the overview comment.

The only durable state is the list of commit SHAs already reviewed. It lives
in the body of the PR's overview comment, as JSON wrapped in two HTML-comment
delimiters so it stays invisible in the rendered markdown:

    ...walkthrough text...
    <!-- presubmit.ai: overview message -->
    <!-- presubmit.ai: payload --{"commits": ["abc...", "def..."]}
    -- presubmit.ai: payload -->

The markers are matched byte for byte. Everything else in the body is free
text and may change between releases.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from github import GithubException
from pydantic import BaseModel, ValidationError

from presubmit_core.models import FileDiff

logger = logging.getLogger(__name__)

OVERVIEW_MESSAGE_SIGNATURE = "\n<!-- presubmit.ai: overview message -->"
PAYLOAD_TAG_OPEN = "\n<!-- presubmit.ai: payload --"
PAYLOAD_TAG_CLOSE = "\n-- presubmit.ai: payload -->"


class ReviewPayload(BaseModel):
    commits: list[str] = []


class ReviewMode(enum.Enum):
    FRESH = "fresh"
    INCREMENTAL = "incremental"


@dataclass
class ReviewState:
    mode: ReviewMode
    commits: list[str] = field(default_factory=list)
    comment_id: int | None = None

    @property
    def last_reviewed_sha(self) -> str | None:
        return self.commits[-1] if self.commits else None


@dataclass
class ReviewPlan:
    """What the review step should look at in this round."""

    skip: bool
    files: list[FileDiff] = field(default_factory=list)
    base_sha: str | None = None

    @property
    def incremental(self) -> bool:
        return self.base_sha is not None


class PayloadError(ValueError):
    pass


def encode_payload(commits: Iterable[str]) -> str:
    payload = ReviewPayload(commits=list(commits))
    return f"{PAYLOAD_TAG_OPEN}{payload.model_dump_json()}{PAYLOAD_TAG_CLOSE}"


def _extract_payload(body: str) -> str:
    start = body.find(PAYLOAD_TAG_OPEN)
    if start == -1:
        raise PayloadError("payload open marker not found")
    start += len(PAYLOAD_TAG_OPEN)
    end = body.find(PAYLOAD_TAG_CLOSE, start)
    if end == -1:
        raise PayloadError("payload close marker not found")
    return body[start:end]


def _decode(body: str | None) -> list[str]:
    try:
        return ReviewPayload.model_validate_json(_extract_payload(body or "")).commits
    except ValidationError as e:
        raise PayloadError(str(e)) from e


def decode_payload(body: str | None) -> list[str]:
    """Return the reviewed commits stored in ``body``, or ``[]`` if unreadable.

    A damaged payload only costs a full re-review, so it is logged and never
    raised.
    """
    try:
        return _decode(body)
    except PayloadError as e:
        logger.warning("error parsing overview payload: %s", e)
        return []


def find_overview_comment(issue_comments: Iterable):
    """Return the first issue comment carrying the overview marker, or None."""
    for comment in issue_comments:
        if OVERVIEW_MESSAGE_SIGNATURE in (comment.body or ""):
            return comment
    return None


def load_review_state(overview_comment) -> ReviewState:
    if overview_comment is None:
        return ReviewState(mode=ReviewMode.FRESH)
    try:
        commits = _decode(overview_comment.body)
    except PayloadError as e:
        logger.warning("error parsing overview payload: %s", e)
        return ReviewState(mode=ReviewMode.FRESH, comment_id=overview_comment.id)
    return ReviewState(mode=ReviewMode.INCREMENTAL, commits=commits, comment_id=overview_comment.id)


def merge_commits(prior: Iterable[str], current: Iterable[str]) -> list[str]:
    """Append the SHAs in ``current`` that are not yet in ``prior``, keeping order."""
    merged = list(prior)
    seen = set(merged)
    for sha in current:
        if sha not in seen:
            merged.append(sha)
            seen.add(sha)
    return merged


def plan_review(
    state: ReviewState,
    head_sha: str,
    file_diffs: list[FileDiff],
    compare: Callable[[str, str], Iterable[str]],
    force_full: bool = False,
) -> ReviewPlan:
    """Decide which files the review step sees this round.

    ``compare(base, head)`` returns the filenames changed between two commits.
    """
    last_sha = state.last_reviewed_sha
    if force_full or state.mode is ReviewMode.FRESH or last_sha is None:
        return ReviewPlan(skip=False, files=list(file_diffs))

    if last_sha == head_sha:
        return ReviewPlan(skip=True, base_sha=last_sha)

    try:
        changed = set(compare(last_sha, head_sha))
    except GithubException as e:
        logger.warning(
            "Could not compare %s...%s (force push?), falling back to a full review: %s",
            last_sha[:7],
            head_sha[:7],
            e,
        )
        return ReviewPlan(skip=False, files=list(file_diffs))

    return ReviewPlan(
        skip=False,
        files=[f for f in file_diffs if f.filename in changed],
        base_sha=last_sha,
    )
