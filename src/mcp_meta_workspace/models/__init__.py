from .batch import (
    BatchResult,
    CommitRequest,
    CommitResult,
    MultiCommitResult,
    ProjectRunResult,
    RollbackOutcome,
)
from .git import BranchStatus, GitCommandResult, ProjectDiff
from .graph import ExecutionOrder, ImpactAnalysis
from .project import ProjectDescriptor
from .repo_state import QueryCondition, QueryResult, RepoState, SkippedProject, WorkspaceState
from .snapshot import (
    RestoreFailure,
    RestoreResult,
    Snapshot,
    SnapshotCreated,
    SnapshotProject,
    SnapshotSummary,
)

__all__ = [
    "BatchResult",
    "BranchStatus",
    "CommitRequest",
    "CommitResult",
    "ExecutionOrder",
    "GitCommandResult",
    "ImpactAnalysis",
    "MultiCommitResult",
    "ProjectDescriptor",
    "ProjectDiff",
    "ProjectRunResult",
    "QueryCondition",
    "QueryResult",
    "RepoState",
    "RestoreFailure",
    "RestoreResult",
    "RollbackOutcome",
    "SkippedProject",
    "Snapshot",
    "SnapshotCreated",
    "SnapshotProject",
    "SnapshotSummary",
    "WorkspaceState",
]
