"""Post model-generated comments to a pull request.

Two kinds of comments come back from the review prompt:

- file-level comments (no ``end_line``), posted one by one at a sentinel
  line;
- line-range comments (``end_line`` set), posted together as a single review
  so the author gets one notification instead of N. If GitHub rejects the
  batch (a stale line mapping is enough to fail the whole request), each
  comment is retried on its own.

Individual posts run concurrently and settle independently: a rejected
comment is logged and its siblings still land. Nothing here raises.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from presubmit_core.prompts import AIComment
from presubmit_core.utils.concurrency import settle_all

logger = logging.getLogger(__name__)

FILE_COMMENT_LINE = -1
BATCH_REVIEW_BODY = "Review submitted"


@dataclass
class SubmissionResult:
    posted: int = 0
    failed: int = 0
    batched: bool = False
    errors: list[str] = field(default_factory=list)


def format_comment_body(comment: AIComment) -> str:
    body = comment.content.strip()
    if comment.header:
        label = f" `{comment.label}`" if comment.label else ""
        body = f"**{comment.header.strip()}**{label}\n\n{body}"
    return body


def _range_start(comment: AIComment) -> int | None:
    if comment.start_line and comment.end_line and comment.start_line < comment.end_line:
        return comment.start_line
    return None


def _batch_payload(comment: AIComment) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "path": comment.file,
        "body": format_comment_body(comment),
        "line": comment.end_line,
        "side": "RIGHT",
    }
    start = _range_start(comment)
    if start is not None:
        payload["start_line"] = start
        payload["start_side"] = "RIGHT"
    return payload


def _post_individually(
    pr,
    commit,
    comments: list[AIComment],
    line_of: Callable[[AIComment], int],
    kind: str,
    result: SubmissionResult,
) -> None:
    def make_call(comment: AIComment) -> Callable[[], Any]:
        kwargs: dict[str, Any] = {"line": line_of(comment)}
        start = _range_start(comment)
        if kind == "line" and start is not None:
            kwargs.update(start_line=start, start_side="RIGHT", side="RIGHT")
        return lambda: pr.create_review_comment(format_comment_body(comment), commit, comment.file, **kwargs)

    outcomes = settle_all([make_call(c) for c in comments])
    for comment, outcome in zip(comments, outcomes):
        if outcome.ok:
            result.posted += 1
            continue
        result.failed += 1
        message = f"error creating {kind} comment on {comment.file}: {outcome.error}"
        result.errors.append(message)
        logger.warning(message)


def submit_review(repo, pr, head_sha: str, comments: Iterable[AIComment]) -> SubmissionResult:
    """Post ``comments`` against ``head_sha``, tolerating partial failure."""
    comments = list(comments)
    result = SubmissionResult()
    if not comments:
        return result

    try:
        commit = repo.get_commit(head_sha)
    except Exception as e:
        logger.warning("Could not resolve head commit %s, no comments posted: %s", head_sha[:7], e)
        result.failed = len(comments)
        result.errors.append(str(e))
        return result

    file_comments = [c for c in comments if not c.end_line]
    line_comments = [c for c in comments if c.end_line]

    if file_comments:
        _post_individually(pr, commit, file_comments, lambda c: FILE_COMMENT_LINE, "file", result)

    if not line_comments:
        return result

    try:
        pr.create_review(
            commit=commit,
            body=BATCH_REVIEW_BODY,
            event="COMMENT",
            comments=[_batch_payload(c) for c in line_comments],
        )
    except Exception as e:
        logger.warning("error submitting review: %s", e)
        logger.info("trying to submit %d comment(s) one by one", len(line_comments))
        _post_individually(pr, commit, line_comments, lambda c: c.end_line, "line", result)
    else:
        result.batched = True
        result.posted += len(line_comments)

    return result
