"""Shared fixtures: real throwaway git repos and logger hygiene."""

from __future__ import annotations

import logging
import os
import subprocess

import pytest


def _git(path: str, *args: str, env: dict[str, str] | None = None) -> None:
    subprocess.run(
        ["git", "-C", path, "-c", "user.name=Test User", "-c", "user.email=test@test.com",
         "-c", "commit.gpgsign=false", *args],
        capture_output=True,
        check=True,
        env=env,
    )


def create_repo(path: str, *, dates: list[str] = (), branch: str = "main", origin: str | None = None) -> str:
    """Create a real git repo with one empty commit per entry in ``dates``."""
    os.makedirs(path, exist_ok=True)
    subprocess.run(["git", "init", "-q", path], capture_output=True, check=True)
    _git(path, "symbolic-ref", "HEAD", f"refs/heads/{branch}")
    for i, when in enumerate(dates):
        env = dict(os.environ, GIT_AUTHOR_DATE=when, GIT_COMMITTER_DATE=when)
        _git(path, "commit", "-q", "--allow-empty", "-m", f"commit {i}", env=env)
    if origin is not None:
        _git(path, "remote", "add", "origin", origin)
    return path


@pytest.fixture
def make_repo():
    return create_repo


@pytest.fixture(autouse=True)
def _reset_gitfinder_logger():
    yield
    logger = logging.getLogger("gitfinder")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
