# File: src/mcp_meta_workspace/engine/workspace.py
from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

from .. import git_utils
from ..errors import ConfigError, GitError, NotFoundError, ValidationError
from ..logging import get_logger
from ..models.batch import BatchResult, CommitRequest, CommitResult, MultiCommitResult
from ..models.git import BranchStatus, GitCommandResult, ProjectDiff
from ..models.graph import ExecutionOrder, ImpactAnalysis
from ..models.project import ProjectDescriptor
from ..models.repo_state import QueryResult, WorkspaceState
from ..registry import find_meta_config, load_projects
from ..settings import Settings
from .batch import BatchExecutor
from .facts import collect_all, map_in_order
from .graph import DependencyGraph
from .query import Query
from .snapshots import SnapshotStore

log = get_logger("mcp.meta.workspace")


class Workspace:
    """
    One engine invocation: the manifest is read once, the project list and
    graph stay fixed for the lifetime of this object, git facts never do.
    """

    def __init__(
        self,
        root: Path,
        projects: Sequence[ProjectDescriptor],
        settings: Optional[Settings] = None,
        config_path: Optional[Path] = None,
    ):
        self.settings = settings or Settings()
        self.root = Path(root).resolve()
        self.config_path = config_path
        self._projects = list(projects)
        self._graph: Optional[DependencyGraph] = None
        self.snapshots = SnapshotStore(
            self.root,
            self.settings.snapshot_dir(self.root),
            git_timeout=self.settings.GIT_TIMEOUT,
        )

    @classmethod
    def open(cls, settings: Optional[Settings] = None) -> "Workspace":
        """
        Raises:
            ConfigError: no manifest found, or it cannot be parsed
        """
        settings = settings or Settings()
        start = settings.start_dir()
        found = find_meta_config(start)
        if found is None:
            raise ConfigError(f"No meta config found from {start}", data={"start": str(start)})
        config_path, fmt = found
        projects = load_projects(config_path, fmt)
        return cls(config_path.parent, projects, settings, config_path)

    @property
    def graph(self) -> DependencyGraph:
        if self._graph is None:
            self._graph = DependencyGraph.build(self._projects)
        return self._graph

    # ---------- registry views ----------

    def projects(self, tag: Optional[str] = None) -> List[ProjectDescriptor]:
        return [p for p in self._projects if p.has_tag(tag)]

    def project(self, name: str) -> ProjectDescriptor:
        for p in self._projects:
            if p.name == name:
                return p
        raise NotFoundError(f"Project '{name}' not found", data={"project": name})

    def project_path(self, name: str) -> Path:
        return self.root / self.project(name).path

    def read_config(self) -> str:
        if self.config_path is None:
            raise ConfigError("Workspace was not opened from a meta config")
        return self.config_path.read_text(encoding="utf-8")

    # ---------- repo facts ----------

    def query_repos(self, query: str) -> QueryResult:
        q = Query.parse(query)
        unknown = q.unknown_fields()
        if unknown:
            log.info("query.unknown_fields", fields=unknown)
        states, skipped = collect_all(
            self._projects, self.root, self.settings.WORKERS, self.settings.GIT_TIMEOUT
        )
        matching = [s for s in states if q.matches(s)]
        return QueryResult(query=query, matches=len(matching), projects=matching, skipped=skipped)

    def workspace_state(self) -> WorkspaceState:
        states, skipped = collect_all(
            self._projects, self.root, self.settings.WORKERS, self.settings.GIT_TIMEOUT
        )
        return WorkspaceState.from_repos(states, skipped)

    def branch_status(self, tag: Optional[str] = None) -> List[BranchStatus]:
        states, _ = collect_all(
            self.projects(tag), self.root, self.settings.WORKERS, self.settings.GIT_TIMEOUT
        )
        return [
            BranchStatus(project=s.name, branch=s.branch, tracking=s.tracking, ahead=s.ahead, behind=s.behind)
            for s in states
        ]

    # ---------- graph ----------

    def analyze_impact(self, project: str) -> ImpactAnalysis:
        return self.graph.analyze_impact(project)

    def execution_order(self, tag: Optional[str] = None, strict: Optional[bool] = None) -> ExecutionOrder:
        if strict is None:
            strict = self.settings.STRICT_CYCLES
        return self.graph.execution_order([tag] if tag else None, strict=strict)

    # ---------- batch ----------

    def batch_execute(
        self,
        command: str,
        tag: Optional[str] = None,
        atomic: bool = False,
        require_snapshot: Optional[bool] = None,
    ) -> BatchResult:
        if not (command or "").strip():
            raise ValidationError("Command must not be empty")
        executor = BatchExecutor(
            self.root,
            self._projects,
            self.snapshots,
            command_timeout=self.settings.COMMAND_TIMEOUT,
            require_snapshot=self.settings.ATOMIC_REQUIRE_SNAPSHOT,
        )
        return executor.execute(command, tag_filter=tag, atomic=atomic, require_snapshot=require_snapshot)

    # ---------- git across projects ----------

    def _existing(self, projects: Sequence[ProjectDescriptor]) -> List[ProjectDescriptor]:
        return [p for p in projects if (self.root / p.path).exists()]

    def diff(self, project: Optional[str] = None, tag: Optional[str] = None, staged: bool = False) -> List[ProjectDiff]:
        selected = [self.project(project)] if project else self.projects(tag)
        out: List[ProjectDiff] = []
        for p in self._existing(selected):
            args = ["diff", "--staged"] if staged else ["diff"]
            try:
                text = git_utils.run_git(self.root / p.path, *args, timeout=self.settings.GIT_TIMEOUT)
            except GitError as e:
                log.info("git.diff.skip", project=p.name, error=e.message)
                continue
            if text:
                out.append(ProjectDiff(project=p.name, diff=text))
        return out

    def _git_each(self, tag: Optional[str], *args: str) -> List[GitCommandResult]:
        """Run one git command in every existing (tag-filtered) project on the pool."""
        def work(p: ProjectDescriptor) -> GitCommandResult:
            try:
                out = git_utils.run_git(self.root / p.path, *args, timeout=self.settings.GIT_TIMEOUT)
                return GitCommandResult(project=p.name, success=True, output=out)
            except GitError as e:
                return GitCommandResult(project=p.name, success=False, error=e.message)

        results = map_in_order(work, self._existing(self.projects(tag)), self.settings.WORKERS)
        log.info("git.each", command=args[0], tag=tag, projects=len(results),
                 failed=sum(1 for r in results if not r.success))
        return results

    def fetch(self, tag: Optional[str] = None) -> List[GitCommandResult]:
        return self._git_each(tag, "fetch", "--all", "--prune")

    def pull(self, tag: Optional[str] = None, rebase: bool = False) -> List[GitCommandResult]:
        return self._git_each(tag, "pull", "--rebase") if rebase else self._git_each(tag, "pull")

    def push(self, tag: Optional[str] = None) -> List[GitCommandResult]:
        return self._git_each(tag, "push")

    def add(self, files: str = ".", tag: Optional[str] = None) -> List[GitCommandResult]:
        return self._git_each(tag, "add", "--", files or ".")

    def commit(self, message: str, tag: Optional[str] = None) -> List[GitCommandResult]:
        """Same message everywhere; projects with nothing staged come back as failures."""
        if not (message or "").strip():
            raise ValidationError("Commit message must not be empty")
        return self._git_each(tag, "commit", "-m", message)

    def checkout(self, branch: str, create: bool = False, tag: Optional[str] = None) -> List[GitCommandResult]:
        if not (branch or "").strip():
            raise ValidationError("Branch must not be empty")
        if create:
            return self._git_each(tag, "checkout", "-b", branch)
        return self._git_each(tag, "checkout", branch)

    def multi_commit(self, commits: Sequence[CommitRequest]) -> MultiCommitResult:
        """
        Commit already-staged changes with a per-project message. Entries are
        workspace-relative paths; "." is the meta repository itself.
        """
        results: List[CommitResult] = []
        for c in commits:
            try:
                path = self.root if c.project == "." else git_utils.safe_path_join(self.root, c.project)
            except GitError as e:
                results.append(CommitResult(project=c.project, success=False, message=c.message, error=e.message))
                continue
            if not path.exists():
                results.append(CommitResult(
                    project=c.project, success=False, message=c.message,
                    error=f"Project path does not exist: {path}",
                ))
                continue
            try:
                git_utils.run_git(path, "commit", "-m", c.message, timeout=self.settings.GIT_TIMEOUT)
                results.append(CommitResult(project=c.project, success=True, message=c.message))
            except GitError as e:
                results.append(CommitResult(project=c.project, success=False, message=c.message, error=e.message))

        succeeded = sum(1 for r in results if r.success)
        return MultiCommitResult(
            results=results,
            total=len(results),
            succeeded=succeeded,
            failed=len(results) - succeeded,
        )
