"""Git utilities for safe repository operations."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from .errors import GitError
from .logging import get_logger

logger = get_logger(__name__)


def safe_path_join(base_path: str | Path, *paths: str) -> Path:
    """Safely join paths, preventing directory traversal attacks.

    Args:
        base_path: Base directory path
        *paths: Path components to join

    Returns:
        Safe joined path

    Raises:
        GitError: If the resulting path would escape the base path
    """
    base = Path(base_path).resolve()
    joined = base.joinpath(*paths).resolve()

    try:
        joined.relative_to(base)
    except ValueError:
        raise GitError(f"Path traversal detected: {paths}")

    return joined


def is_git_repo(path: Path) -> bool:
    return (path / ".git").exists()


def open_repo(path: str | Path) -> Repo:
    """Open the repository whose working tree is exactly ``path``.

    Raises:
        GitError: If the path is missing or not a git working copy
    """
    try:
        return Repo(str(path))
    except NoSuchPathError:
        raise GitError(f"Path does not exist: {path}")
    except InvalidGitRepositoryError:
        raise GitError(f"Not a git repository: {path}")


def current_branch(repo: Repo, timeout: Optional[float] = None) -> str:
    """Branch name, also for an unborn branch; "HEAD" when detached."""
    try:
        return repo.git.symbolic_ref("--short", "-q", "HEAD", kill_after_timeout=timeout)
    except GitCommandError:
        return "HEAD"


def head_commit(repo: Repo, timeout: Optional[float] = None) -> Optional[str]:
    try:
        return repo.git.rev_parse("HEAD", kill_after_timeout=timeout)
    except GitCommandError:
        return None


def is_dirty(repo: Repo, timeout: Optional[float] = None) -> bool:
    """Working tree, index or untracked changes."""
    out = repo.git.status("--porcelain", kill_after_timeout=timeout)
    return bool(out.strip())


def tracking_branch(repo: Repo, branch: str, timeout: Optional[float] = None) -> Optional[str]:
    if branch == "HEAD":
        return None
    try:
        out = repo.git.for_each_ref(
            "--format=%(upstream:short)", f"refs/heads/{branch}", kill_after_timeout=timeout
        )
    except GitCommandError:
        return None
    return out.strip() or None


def ahead_behind(
    repo: Repo, branch: str, tracking: Optional[str], timeout: Optional[float] = None
) -> Tuple[int, int]:
    """Commits on ``branch`` not on ``tracking`` and vice versa; (0, 0) without upstream."""
    if not tracking:
        return 0, 0
    try:
        out = repo.git.rev_list(
            "--left-right", "--count", f"{branch}...{tracking}", kill_after_timeout=timeout
        )
    except GitCommandError:
        # upstream configured but the remote ref is gone
        return 0, 0
    parts = out.split()
    if len(parts) != 2:
        return 0, 0
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        return 0, 0


def last_commit(repo: Repo, timeout: Optional[float] = None) -> str:
    try:
        return repo.git.log("-1", "--format=%h %s", kill_after_timeout=timeout)
    except GitCommandError:
        return ""


def run_git(path: str | Path, *args: str, timeout: Optional[float] = None) -> str:
    """Run a git command in ``path``.

    Returns:
        Stripped stdout

    Raises:
        GitError: With git's stderr when the command fails
    """
    with open_repo(path) as repo:
        try:
            return repo.git.execute(["git", *args], kill_after_timeout=timeout)
        except GitCommandError as e:
            stderr = (e.stderr or "").strip()
            # GitPython prefixes captured stderr with "stderr: '"
            if stderr.startswith("stderr: '"):
                stderr = stderr[len("stderr: '"):].rstrip("'").strip()
            logger.debug("git.failed", path=str(path), args=list(args), error=stderr)
            raise GitError(stderr or str(e), data={"args": list(args)})


@dataclass
class CommandOutcome:
    success: bool
    stdout: str = ""
    stderr: str = ""
    exit_code: Optional[int] = None
    error: Optional[str] = None


def run_shell(command: str, cwd: Path, timeout: Optional[float] = None) -> CommandOutcome:
    """Run ``command`` through ``sh -c`` in ``cwd`` and capture its output."""
    try:
        proc = subprocess.run(
            command,
            shell=True,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        return CommandOutcome(
            success=False,
            stdout=_text(e.stdout),
            stderr=_text(e.stderr),
            error=f"Command timed out after {timeout}s",
        )
    except OSError as e:
        return CommandOutcome(success=False, error=str(e))
    return CommandOutcome(
        success=proc.returncode == 0,
        stdout=proc.stdout,
        stderr=proc.stderr,
        exit_code=proc.returncode,
    )


def _text(v: bytes | str | None) -> str:
    if v is None:
        return ""
    if isinstance(v, bytes):
        return v.decode("utf-8", "replace")
    return v
