"""Error taxonomy and exit codes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    INVALID_ARGS = 2
    GIT_ERROR = 4


@dataclass
class GitFinderError(Exception):
    message: str
    code: ExitCode = ExitCode.GIT_ERROR

    def __str__(self) -> str:
        return self.message


class GitError(GitFinderError):
    """A git command failed or returned something unusable."""


class NotARepositoryError(GitError):
    pass


class MissingBranchError(GitError):
    """Neither ``main`` nor ``master`` resolves to a commit."""


class GitNotFoundError(GitError):
    pass
