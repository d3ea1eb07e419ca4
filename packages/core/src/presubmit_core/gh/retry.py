"""Transport retry policy for the GitHub client.

PyGithub's ``GithubRetry`` already backs off on primary rate limits (waiting
for the reset time) and on secondary rate limits. Two adjustments:

- the retry count is capped, so a run stuck behind a rate limit fails
  instead of waiting forever;
- creating a review is never retried on a secondary rate limit. GitHub may
  have accepted the request before throttling the response, and replaying it
  would post every comment twice.
"""

from __future__ import annotations

import logging
import re

from github import GithubRetry
from urllib3.exceptions import MaxRetryError

logger = logging.getLogger(__name__)

MAX_RETRIES = 3

_REVIEW_POST_RE = re.compile(r"/repos/[^/]+/[^/]+/pulls/\d+/reviews/?(?:\?.*)?$")
_RATE_LIMIT_STATUSES = (403, 429)


def is_review_post(method: str | None, url: str | None) -> bool:
    return (method or "").upper() == "POST" and bool(url) and bool(_REVIEW_POST_RE.search(url))


class ReviewSafeRetry(GithubRetry):
    def __init__(self, **kwargs):
        kwargs.setdefault("total", MAX_RETRIES)
        # Hand the final throttled response back to PyGithub so it surfaces
        # as a GithubException rather than a urllib3 error.
        kwargs.setdefault("raise_on_status", False)
        super().__init__(**kwargs)

    def increment(self, method=None, url=None, *args, **kwargs):
        response = kwargs.get("response")
        if response is not None and response.status in _RATE_LIMIT_STATUSES and is_review_post(method, url):
            logger.warning("Rate limited while creating a review (%s %s); not retrying", method, url)
            raise MaxRetryError(kwargs.get("_pool"), url, None)
        return super().increment(method, url, *args, **kwargs)
