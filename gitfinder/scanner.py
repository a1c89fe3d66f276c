"""Repo discovery — concurrent walk of a directory tree.

Every directory becomes its own unit of work on a thread pool. A unit lists
its directory while holding a permit from the ``ConcurrencyLimiter``, then
(permit released) checks each subdirectory: a qualifying repository is
summarized and reported right there, anything else is submitted as a new
unit. Parents never wait for children; ``TaskJoiner`` waits for everything.
"""

from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from gitfinder.errors import GitError
from gitfinder.filters import RepoFilter
from gitfinder.git import GitInspector
from gitfinder.limiter import DEFAULT_MAX_OPEN, ConcurrencyLimiter, Gauge
from gitfinder.report import ReportWriter, summarize

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 32


@dataclass
class WalkConfig:
    root: Path
    blocklist: frozenset[str] = field(default_factory=frozenset)
    max_open: int = DEFAULT_MAX_OPEN
    workers: int = DEFAULT_WORKERS


@dataclass
class WalkStats:
    units: int = 0
    matches: int = 0
    errors: int = 0
    peak: int = 0


class TaskJoiner:
    """Registry of in-flight walk units.

    A unit is registered by its parent while the parent is still running, and
    the parent's own future is already registered, so no unit that could
    still submit more work is ever invisible to ``join``.
    """

    def __init__(self) -> None:
        self._pending: list[Future] = []
        self._lock = threading.Lock()
        self.rounds = 0

    def spawn(self, executor: ThreadPoolExecutor, fn: Callable[..., None], *args) -> Future:
        future = executor.submit(fn, *args)
        with self._lock:
            self._pending.append(future)
        return future

    def join(self) -> None:
        """Block until every registered unit, including late arrivals, is done."""
        while True:
            with self._lock:
                snapshot, self._pending = self._pending, []
            if not snapshot:
                return
            self.rounds += 1
            wait(snapshot)


class WalkScheduler:
    def __init__(
        self,
        repo_filter: RepoFilter,
        writer: ReportWriter,
        *,
        inspector: GitInspector | None = None,
        limiter: ConcurrencyLimiter | None = None,
        workers: int = DEFAULT_WORKERS,
    ) -> None:
        self.repo_filter = repo_filter
        self.writer = writer
        self.inspector = inspector or repo_filter.inspector
        self.limiter = limiter or ConcurrencyLimiter()
        self.workers = workers
        self.gauge = Gauge()
        self.joiner = TaskJoiner()
        self.stats = WalkStats()
        self._stats_lock = threading.Lock()
        self._executor: ThreadPoolExecutor | None = None

    @classmethod
    def from_config(cls, config: WalkConfig, writer: ReportWriter, inspector: GitInspector | None = None) -> WalkScheduler:
        inspector = inspector or GitInspector()
        return cls(
            RepoFilter(config.blocklist, inspector),
            writer,
            inspector=inspector,
            limiter=ConcurrencyLimiter(config.max_open),
            workers=config.workers,
        )

    def walk(self, root: str | os.PathLike[str]) -> WalkStats:
        """Walk ``root`` to exhaustion and return what happened.

        The root itself is never tested as a repository, only its
        descendants are.
        """
        root = Path(root)
        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="walk") as executor:
            self._executor = executor
            try:
                self._spawn(root, root)
                self.joiner.join()
            finally:
                self._executor = None
        self.stats.peak = self.gauge.peak
        return self.stats

    def _spawn(self, path: Path, root: Path) -> None:
        with self._stats_lock:
            self.stats.units += 1
        self.joiner.spawn(self._executor, self._run_unit, path, root)

    def _count(self, name: str) -> None:
        with self._stats_lock:
            setattr(self.stats, name, getattr(self.stats, name) + 1)

    def _run_unit(self, path: Path, root: Path) -> None:
        self.gauge.enter()
        try:
            self._walk_dir(path, root)
        except Exception:
            self._count("errors")
            logger.exception("Walk aborted in %s", path)
        finally:
            self.gauge.exit()

    def _walk_dir(self, path: Path, root: Path) -> None:
        try:
            subdirs = self._read_subdirs(path)
        except OSError as exc:
            self._count("errors")
            logger.error("Failed to read directory %s: %s", path, exc.strerror or exc)
            return

        for subdir in subdirs:
            if self.repo_filter.is_blocked(subdir):
                # Blocklisted names prune the whole subtree.
                continue
            repo = self.repo_filter.unpushed_repo(subdir)
            if repo is None:
                self._spawn(subdir, root)
                continue
            try:
                match = summarize(self.inspector, subdir, root, repo=repo)
            except GitError as exc:
                self._count("errors")
                logger.error("Failed to inspect %s: %s", subdir, exc)
                continue
            self._count("matches")
            self.writer.write(match)

    def _read_subdirs(self, path: Path) -> list[Path]:
        """List immediate subdirectories, holding a permit while the handle is open.

        Symlinks are not followed, so link cycles cannot trap the walk.
        """
        with self.limiter.permit():
            with os.scandir(path) as entries:
                return [Path(e.path) for e in entries if e.is_dir(follow_symlinks=False)]
