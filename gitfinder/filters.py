"""Repository filter — which directories count as never-pushed repos."""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

from gitfinder.errors import GitError
from gitfinder.git import GitInspector, Repository

# Leaf names that usually hold build output or dependency checkouts
# rather than someone's own work.
NOISE_DIRS = frozenset({
    "node_modules", ".venv", "venv", "__pycache__", "target", "build",
    "dist", ".gradle", ".dart_tool", "vendor", ".next", ".nuxt",
    ".builds", ".build", "Build", ".tox", ".mypy_cache", ".ruff_cache",
    ".pytest_cache", "site-packages", ".cargo", ".rustup", "Pods",
})

ORIGIN = "origin"


class RepoFilter:
    """Accept directories holding a git repository with no ``origin`` remote.

    Checks run in order and stop at the first failure:

    1. the directory's own name is not on the blocklist
    2. the directory opens as a git repository
    3. the repository has no remote called ``origin``

    The blocklist is frozen at construction, so one instance can be shared
    by every walk unit.
    """

    def __init__(self, blocklist: Iterable[str] = (), inspector: GitInspector | None = None) -> None:
        self.blocklist = frozenset(blocklist)
        self.inspector = inspector or GitInspector()

    def is_blocked(self, path: str | os.PathLike[str]) -> bool:
        return Path(path).name in self.blocklist

    def unpushed_repo(self, path: str | os.PathLike[str]) -> Repository | None:
        """Open ``path`` and return it if it has no ``origin`` remote.

        Only checks 2 and 3 run here; callers that already pruned blocklisted
        names use this to keep the opened handle.
        """
        try:
            repo = self.inspector.open(path)
            if self.inspector.has_remote(repo, ORIGIN):
                return None
        except (GitError, OSError):
            return None
        return repo

    def qualifies(self, path: str | os.PathLike[str]) -> bool:
        if self.is_blocked(path):
            return False
        return self.unpushed_repo(path) is not None
