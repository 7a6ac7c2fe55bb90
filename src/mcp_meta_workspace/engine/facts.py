# File: src/mcp_meta_workspace/engine/facts.py
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

from git import GitCommandError

from .. import git_utils
from ..errors import CollectionError, GitError
from ..logging import get_logger
from ..models.project import ProjectDescriptor
from ..models.repo_state import RepoState, SkippedProject

log = get_logger("mcp.meta.facts")

T = TypeVar("T")


def collect_repo_state(
    project: ProjectDescriptor,
    root: Path,
    timeout: Optional[float] = None,
) -> RepoState:
    """
    Query one working copy for its live facts.

    Raises:
        CollectionError: path missing, not a git repository, or git failed
    """
    path = root / project.path
    if not path.exists():
        raise CollectionError(project.name, f"Path does not exist: {path}")
    if not git_utils.is_git_repo(path):
        raise CollectionError(project.name, f"Not a git repository: {path}")

    try:
        with git_utils.open_repo(path) as repo:
            branch = git_utils.current_branch(repo, timeout)
            tracking = git_utils.tracking_branch(repo, branch, timeout)
            ahead, behind = git_utils.ahead_behind(repo, branch, tracking, timeout)
            return RepoState(
                name=project.name,
                path=project.path,
                tags=list(project.tags),
                branch=branch,
                is_dirty=git_utils.is_dirty(repo, timeout),
                ahead=ahead,
                behind=behind,
                last_commit=git_utils.last_commit(repo, timeout),
                tracking=tracking,
            )
    except (GitError, GitCommandError) as e:
        raise CollectionError(project.name, f"git failed for {path}: {e}")


def map_in_order(
    fn: Callable[[ProjectDescriptor], T],
    projects: Sequence[ProjectDescriptor],
    workers: int,
) -> List[T]:
    """
    Run `fn` per project on a bounded pool. Results keep input order no
    matter which finishes first; `fn` is expected to capture its own errors.
    """
    if not projects:
        return []
    with ThreadPoolExecutor(max_workers=max(1, min(workers, len(projects)))) as ex:
        futures = [ex.submit(fn, p) for p in projects]
        return [f.result() for f in futures]


def collect_all(
    projects: Sequence[ProjectDescriptor],
    root: Path,
    workers: int = 8,
    timeout: Optional[float] = None,
) -> Tuple[List[RepoState], List[SkippedProject]]:
    def work(p: ProjectDescriptor) -> Tuple[Optional[RepoState], Optional[SkippedProject]]:
        try:
            return collect_repo_state(p, root, timeout), None
        except CollectionError as e:
            log.info("facts.skip", project=p.name, reason=e.message)
            return None, SkippedProject(project=p.name, reason=e.message)

    states: List[RepoState] = []
    skipped: List[SkippedProject] = []
    for state, skip in map_in_order(work, projects, workers):
        if state is not None:
            states.append(state)
        if skip is not None:
            skipped.append(skip)
    return states, skipped
