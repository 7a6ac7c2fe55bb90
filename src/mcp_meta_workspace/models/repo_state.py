# File: src/mcp_meta_workspace/models/repo_state.py
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator


class RepoState(BaseModel):
    """
    Live git facts for one project. Recomputed on every query, never cached.
    """
    name: str
    path: str
    tags: List[str] = Field(default_factory=list)
    branch: str
    is_dirty: bool = False
    ahead: int = Field(default=0, ge=0)
    behind: int = Field(default=0, ge=0)
    last_commit: str = ""
    tracking: Optional[str] = None

    @model_validator(mode="after")
    def _no_upstream_no_divergence(self) -> "RepoState":
        if self.tracking is None:
            self.ahead = 0
            self.behind = 0
        return self


class SkippedProject(BaseModel):
    project: str
    reason: str


class QueryCondition(BaseModel):
    field: str
    value: str


class QueryResult(BaseModel):
    query: str
    matches: int
    projects: List[RepoState]
    skipped: List[SkippedProject] = Field(default_factory=list)


class WorkspaceState(BaseModel):
    total_repos: int
    dirty_count: int
    clean_count: int
    ahead_count: int
    behind_count: int
    branches: Dict[str, List[str]] = Field(default_factory=dict)
    tags: Dict[str, List[str]] = Field(default_factory=dict)
    repos: List[RepoState] = Field(default_factory=list)
    skipped: List[SkippedProject] = Field(default_factory=list)

    @classmethod
    def from_repos(cls, repos: List[RepoState], skipped: Optional[List[SkippedProject]] = None) -> "WorkspaceState":
        branches: Dict[str, List[str]] = {}
        tags: Dict[str, List[str]] = {}
        for r in repos:
            branches.setdefault(r.branch, []).append(r.name)
            for t in r.tags:
                tags.setdefault(t, []).append(r.name)
        dirty = sum(1 for r in repos if r.is_dirty)
        return cls(
            total_repos=len(repos),
            dirty_count=dirty,
            clean_count=len(repos) - dirty,
            ahead_count=sum(1 for r in repos if r.ahead > 0),
            behind_count=sum(1 for r in repos if r.behind > 0),
            branches=branches,
            tags=tags,
            repos=repos,
            skipped=skipped or [],
        )
