from .batch import BatchExecutor
from .facts import collect_all, collect_repo_state
from .graph import DependencyGraph
from .query import Query
from .snapshots import SnapshotStore, sanitize_name
from .workspace import Workspace

__all__ = [
    "BatchExecutor",
    "DependencyGraph",
    "Query",
    "SnapshotStore",
    "Workspace",
    "collect_all",
    "collect_repo_state",
    "sanitize_name",
]
