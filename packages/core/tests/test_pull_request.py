"""Tests for GitHub pull request helper functions."""

from unittest.mock import MagicMock, patch

from presubmit_core.gh.pull_request import (
    get_client,
    get_incremental_files,
    list_commits,
    list_files,
    list_review_comments,
    update_issue_comment,
    update_title,
)
from presubmit_core.gh.retry import ReviewSafeRetry
from presubmit_core.models import Commit, File

SHA = "a" * 40
SHA2 = "b" * 40


def _file(filename):
    f = MagicMock()
    f.filename = filename
    return f


class TestGetIncrementalFiles:
    def test_returns_filenames_from_compare(self):
        repo = MagicMock()
        repo.compare.return_value.files = [_file("src/foo.py"), _file("src/bar.py")]
        assert get_incremental_files(repo, SHA, SHA2) == ["src/foo.py", "src/bar.py"]
        repo.compare.assert_called_once_with(SHA, SHA2)

    def test_returns_empty_list_when_no_changes(self):
        repo = MagicMock()
        repo.compare.return_value.files = []
        assert get_incremental_files(repo, SHA, SHA2) == []


def test_get_client_installs_retry_policy():
    with patch("presubmit_core.gh.pull_request.Github") as github:
        get_client("token")
    assert isinstance(github.call_args.kwargs["retry"], ReviewSafeRetry)


def test_list_files_converts_records():
    pr = MagicMock()
    pr.get_files.return_value = [
        {"filename": "a.py", "status": "renamed", "previous_filename": "old.py", "patch": "@@ -1 +1 @@\n-a\n+b"}
    ]
    assert list_files(pr) == [
        File(filename="a.py", status="renamed", previous_filename="old.py", patch="@@ -1 +1 @@\n-a\n+b")
    ]


def test_list_commits_converts_records():
    pr = MagicMock()
    pr.get_commits.return_value = [{"sha": SHA, "commit": {"message": "Fix bug"}}]
    assert list_commits(pr) == [Commit(sha=SHA, message="Fix bug")]


def test_list_review_comments_skips_malformed_records(caplog):
    pr = MagicMock()
    pr.get_review_comments.return_value = [
        {"id": 1, "path": "a.py", "body": "ok", "user": {"login": "rev"}, "line": 3},
        {"id": 2, "path": "a.py", "body": "bad", "user": {"login": "rev"}, "line": True},
    ]
    comments = list_review_comments(pr)
    assert [c.id for c in comments] == [1]
    assert "Skipping malformed review comment" in caplog.text


def test_update_issue_comment_edits_body():
    comment = MagicMock()
    update_issue_comment(comment, "new body")
    comment.edit.assert_called_once_with("new body")


def test_update_title():
    pr = MagicMock()
    update_title(pr, "Better title")
    pr.edit.assert_called_once_with(title="Better title")
