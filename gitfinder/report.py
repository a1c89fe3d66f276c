"""Per-repository summaries and their CSV/JSON rendering."""

from __future__ import annotations

import json
import os
import threading
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO, Union

from gitfinder.errors import GitError
from gitfinder.git import GitInspector, Repository

HEADER = "repository,oldest,newest,count"
DATE_FORMAT = "%y-%m-%d"
GIT_DIR_NAME = ".git"

StrPath = Union[str, os.PathLike]


@dataclass(frozen=True)
class RepoMatch:
    path: str
    oldest: Optional[datetime]
    newest: Optional[datetime]
    count: int


def simplify_repo_path(path: StrPath, root: StrPath) -> str:
    """Return ``path`` relative to ``root``, minus a trailing ``.git``.

    >>> simplify_repo_path("/home/pete/projects/foo/lib/.git", "/home/pete/projects")
    'foo/lib'
    """
    path = Path(path)
    if path.name == GIT_DIR_NAME:
        path = path.parent
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        # The walker only hands out paths found under the root.
        raise AssertionError(f"{path} is not under walk root {root}") from None


def _to_datetime(ts: Optional[int], path: StrPath) -> Optional[datetime]:
    if ts is None:
        return None
    try:
        return datetime.fromtimestamp(ts)
    except (ValueError, OverflowError, OSError) as exc:
        raise GitError(f"{path}: commit time out of range ({ts})") from exc


def summarize(
    inspector: GitInspector,
    path: StrPath,
    root: StrPath,
    repo: Optional[Repository] = None,
) -> RepoMatch:
    """Count commits on the primary branch and find their date range.

    ``repo`` is an already opened handle for ``path``; without one the
    repository is opened here.

    Raises ``GitError`` when the repository cannot be inspected, including
    when it has neither a ``main`` nor a ``master`` branch or a commit time
    cannot be represented as a date.
    """
    if repo is None:
        repo = inspector.open(path)
    branch = inspector.primary_branch(repo)

    oldest: Optional[int] = None
    newest: Optional[int] = None
    count = 0
    for ts in inspector.commit_times(repo, branch):
        if oldest is None or ts < oldest:
            oldest = ts
        if newest is None or ts > newest:
            newest = ts
        count += 1

    return RepoMatch(
        path=simplify_repo_path(path, root),
        oldest=_to_datetime(oldest, path),
        newest=_to_datetime(newest, path),
        count=count,
    )


def _format_date(dt: Optional[datetime]) -> str:
    return dt.strftime(DATE_FORMAT) if dt is not None else ""


def format_row(match: RepoMatch) -> str:
    return f"{match.path},{_format_date(match.oldest)},{_format_date(match.newest)},{match.count}"


class ReportWriter:
    """Thread-safe sink for matches.

    In CSV mode each match is written as soon as it arrives. In JSON mode
    matches are held until ``close()`` so the output is a single array.
    """

    def __init__(self, stream: TextIO, *, as_json: bool = False) -> None:
        self.stream = stream
        self.as_json = as_json
        self.count = 0
        self._pending: list[RepoMatch] = []
        self._lock = threading.Lock()

    def open(self) -> None:
        if not self.as_json:
            print(HEADER, file=self.stream, flush=True)

    def write(self, match: RepoMatch) -> None:
        line = format_row(match)
        with self._lock:
            self.count += 1
            if self.as_json:
                self._pending.append(match)
            else:
                print(line, file=self.stream, flush=True)

    def close(self) -> None:
        if not self.as_json:
            return
        with self._lock:
            data = [
                {
                    "repository": m.path,
                    "oldest": m.oldest.date().isoformat() if m.oldest else None,
                    "newest": m.newest.date().isoformat() if m.newest else None,
                    "count": m.count,
                }
                for m in sorted(self._pending, key=lambda m: m.path)
            ]
        print(json.dumps(data, indent=2), file=self.stream, flush=True)
