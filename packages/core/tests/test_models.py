"""Tests for coercing GitHub records at the API boundary."""

import types

import pytest

from presubmit_core.models import Commit, File, ReviewComment


class TestFile:
    def test_from_mapping(self):
        f = File.from_github({"filename": "a.py", "status": "renamed", "previous_filename": "b.py", "patch": "@@"})
        assert f == File(filename="a.py", status="renamed", previous_filename="b.py", patch="@@")

    def test_from_object_without_patch(self):
        obj = types.SimpleNamespace(filename="logo.png", status="added", previous_filename=None, patch=None)
        f = File.from_github(obj)
        assert f.patch is None
        assert f.previous_filename is None

    def test_unknown_status_rejected(self):
        with pytest.raises(ValueError, match="Unknown file status"):
            File.from_github({"filename": "a.py", "status": "exploded"})

    def test_missing_filename_rejected(self):
        with pytest.raises(ValueError):
            File.from_github({"status": "added"})


class TestReviewComment:
    def test_from_mapping(self):
        c = ReviewComment.from_github(
            {
                "id": 10,
                "path": "a.py",
                "body": "nit",
                "line": "12",
                "start_line": None,
                "in_reply_to_id": None,
                "user": {"login": "octocat"},
            }
        )
        assert c.id == 10
        assert c.line == 12
        assert c.start_line is None
        assert c.user_login == "octocat"
        assert c.is_reply is False

    def test_from_pygithub_like_object(self):
        obj = types.SimpleNamespace(
            id=11,
            path="a.py",
            body="agreed",
            line=None,
            start_line=None,
            in_reply_to_id=10,
            user=types.SimpleNamespace(login="hubot"),
        )
        c = ReviewComment.from_github(obj)
        assert c.is_reply is True
        assert c.in_reply_to_id == 10
        assert c.user_login == "hubot"

    def test_deleted_user_becomes_ghost(self):
        c = ReviewComment.from_github({"id": 1, "path": "a.py", "body": "x", "user": None})
        assert c.user_login == "ghost"

    def test_missing_body_coerced_to_empty(self):
        c = ReviewComment.from_github({"id": 1, "path": "a.py", "user": {"login": "a"}})
        assert c.body == ""

    def test_missing_id_rejected(self):
        with pytest.raises(ValueError):
            ReviewComment.from_github({"path": "a.py", "body": "x"})

    def test_boolean_line_rejected(self):
        with pytest.raises(ValueError):
            ReviewComment.from_github({"id": 1, "path": "a.py", "line": True})


class TestCommit:
    def test_from_mapping(self):
        c = Commit.from_github({"sha": "abc", "commit": {"message": "Fix bug\n\nDetails"}})
        assert c == Commit(sha="abc", message="Fix bug\n\nDetails")

    def test_missing_sha_rejected(self):
        with pytest.raises(ValueError):
            Commit.from_github({"commit": {"message": "x"}})
