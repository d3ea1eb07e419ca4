"""Records exchanged between the GitHub API and the review engine.

PyGithub hands back lazily-populated objects whose attributes may be missing
or None depending on the endpoint that produced them. Every record here is
built through a ``from_github`` constructor that accepts either a PyGithub
object or a plain mapping (the shape of the REST JSON), coerces the fields
the engine relies on, and rejects shapes it cannot make sense of. Past this
boundary the rest of the package only ever sees these typed records.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

FILE_STATUSES = frozenset({"added", "removed", "modified", "renamed", "copied", "changed", "unchanged"})

_MISSING = object()


def _get(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        value = obj.get(name, default)
    else:
        value = getattr(obj, name, default)
    return default if value is None else value


def _optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"Expected an integer, got {value!r}")
    return int(value)


@dataclass(frozen=True)
class File:
    """One changed path in a pull request snapshot."""

    filename: str
    status: str
    previous_filename: str | None = None
    patch: str | None = None

    @classmethod
    def from_github(cls, obj: Any) -> File:
        filename = _get(obj, "filename")
        if not filename:
            raise ValueError("File record has no filename")
        status = _get(obj, "status", "")
        if status not in FILE_STATUSES:
            raise ValueError(f"Unknown file status {status!r} for {filename}")
        return cls(
            filename=str(filename),
            status=status,
            previous_filename=_get(obj, "previous_filename") or None,
            patch=_get(obj, "patch") or None,
        )


@dataclass(frozen=True)
class ReviewComment:
    """A review comment already present on the pull request.

    A comment whose ``in_reply_to_id`` is set is a reply and never starts a
    chain of its own.
    """

    id: int
    path: str
    body: str
    user_login: str
    line: int | None = None
    start_line: int | None = None
    in_reply_to_id: int | None = None

    @property
    def is_reply(self) -> bool:
        return self.in_reply_to_id is not None

    @classmethod
    def from_github(cls, obj: Any) -> ReviewComment:
        comment_id = _get(obj, "id", _MISSING)
        path = _get(obj, "path")
        if comment_id is _MISSING or not path:
            raise ValueError("Review comment record needs both 'id' and 'path'")
        user = _get(obj, "user")
        login = _get(user, "login", "ghost") if user is not None else "ghost"
        return cls(
            id=int(comment_id),
            path=str(path),
            body=str(_get(obj, "body", "")),
            user_login=str(login),
            line=_optional_int(_get(obj, "line")),
            start_line=_optional_int(_get(obj, "start_line")),
            in_reply_to_id=_optional_int(_get(obj, "in_reply_to_id")),
        )


@dataclass(frozen=True)
class Commit:
    sha: str
    message: str = ""

    @classmethod
    def from_github(cls, obj: Any) -> Commit:
        sha = _get(obj, "sha")
        if not sha:
            raise ValueError("Commit record has no sha")
        git_commit = _get(obj, "commit")
        message = _get(git_commit, "message", "") if git_commit is not None else ""
        return cls(sha=str(sha), message=str(message))


@dataclass
class CommentChain:
    """A root review comment followed by its direct replies, in platform order."""

    comments: list[ReviewComment] = field(default_factory=list)

    @property
    def root(self) -> ReviewComment:
        return self.comments[0]


@dataclass
class Hunk:
    """One ``@@`` block of a patch.

    ``start_line`` and ``end_line`` are inclusive new-file line numbers
    spanning the hunk's context and added lines. ``diff`` holds the raw hunk
    text, header included, one trailing newline per line.
    """

    start_line: int
    end_line: int
    diff: str
    comment_chains: list[CommentChain] = field(default_factory=list)


@dataclass
class FileDiff:
    file: File
    hunks: list[Hunk] = field(default_factory=list)

    @property
    def filename(self) -> str:
        return self.file.filename

    @property
    def status(self) -> str:
        return self.file.status

    @property
    def previous_filename(self) -> str | None:
        return self.file.previous_filename

    @property
    def patch(self) -> str | None:
        return self.file.patch
