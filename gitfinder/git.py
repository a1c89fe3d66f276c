"""Git inspection — subprocess-based, read-only."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path

from gitfinder.errors import GitError, GitNotFoundError, MissingBranchError, NotARepositoryError

PRIMARY_BRANCHES = ("main", "master")


@dataclass(frozen=True)
class Repository:
    path: Path      # directory that was opened
    git_dir: Path   # absolute path of the repository metadata directory


def _git_env(path: Path) -> dict[str, str]:
    """Environment that keeps git from searching above ``path``."""
    env = {k: v for k, v in os.environ.items() if not k.startswith("GIT_")}
    env["GIT_CEILING_DIRECTORIES"] = str(path.parent)
    env["LC_ALL"] = "C"
    return env


def _run_git(cwd: Path, args: list[str], timeout: int = 60) -> str:
    """Run a git command in ``cwd`` and return stdout, raising on failure."""
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            env=_git_env(cwd),
            capture_output=True,
            text=True,
            timeout=timeout,
            errors="replace",
        )
    except FileNotFoundError as exc:
        if exc.filename == "git":
            raise GitNotFoundError("git executable not found on PATH") from exc
        raise GitError(f"{cwd}: {exc.strerror}") from exc
    except subprocess.TimeoutExpired as exc:
        raise GitError(f"git {' '.join(args)} timed out after {timeout}s") from exc
    except OSError as exc:
        raise GitError(f"{cwd}: {exc.strerror or exc}") from exc

    if result.returncode != 0:
        detail = result.stderr.strip().splitlines()
        raise GitError(detail[-1] if detail else f"git {args[0]} exited with {result.returncode}")
    return result.stdout


class GitInspector:
    """Narrow read-only view of a git repository.

    The walker only ever needs four questions answered, so that is all this
    class offers. Anything with the same methods can stand in for it.
    """

    def open(self, path: str | os.PathLike[str]) -> Repository:
        # git ignores relative ceiling entries, so anchor the path first.
        path = Path(path).absolute()
        try:
            out = _run_git(path, ["rev-parse", "--absolute-git-dir"])
        except GitNotFoundError:
            raise
        except GitError as exc:
            raise NotARepositoryError(f"{path}: {exc}") from exc
        return Repository(path=path, git_dir=Path(out.strip()))

    def has_remote(self, repo: Repository, name: str) -> bool:
        out = _run_git(repo.git_dir, ["--git-dir", str(repo.git_dir), "remote"])
        return name in out.split()

    def primary_branch(self, repo: Repository) -> str:
        for branch in PRIMARY_BRANCHES:
            try:
                _run_git(repo.git_dir, [
                    "--git-dir", str(repo.git_dir),
                    "rev-parse", "--verify", "--quiet", f"refs/heads/{branch}^{{commit}}",
                ])
            except GitNotFoundError:
                raise
            except GitError:
                continue
            return branch
        raise MissingBranchError(f"{repo.path}: no 'main' or 'master' branch")

    def commit_times(self, repo: Repository, branch: str) -> list[int]:
        """Committer timestamps (epoch seconds) of every commit reachable from ``branch``."""
        out = _run_git(repo.git_dir, [
            "--git-dir", str(repo.git_dir),
            "log", "--no-show-signature", "--format=%ct", f"refs/heads/{branch}", "--",
        ])
        times: list[int] = []
        for line in out.splitlines():
            line = line.strip()
            if not line:
                continue
            try:
                times.append(int(line))
            except ValueError as exc:
                raise GitError(f"{repo.path}: unexpected log line {line!r}") from exc
        return times
