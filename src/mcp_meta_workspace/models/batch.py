# File: src/mcp_meta_workspace/models/batch.py
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .snapshot import RestoreResult


class ProjectRunResult(BaseModel):
    project: str
    success: bool
    stdout: str = ""
    stderr: str = ""
    exit_code: Optional[int] = None
    error: Optional[str] = None


RollbackStatus = Literal["not_attempted", "unavailable", "restored", "partial", "failed"]


class RollbackOutcome(BaseModel):
    """
    not_attempted: no rollback was needed or the run was not atomic
    unavailable:   a rollback was needed but no safety snapshot exists
    restored / partial: restore ran; see result
    failed:        restore itself raised; see error
    """
    status: RollbackStatus = "not_attempted"
    snapshot: Optional[str] = None
    result: Optional[RestoreResult] = None
    error: Optional[str] = None


class BatchResult(BaseModel):
    command: str
    tag_filter: Optional[str] = None
    atomic: bool = False
    snapshot: Optional[str] = None
    snapshot_error: Optional[str] = None
    results: List[ProjectRunResult] = Field(default_factory=list)
    has_failure: bool = False
    rolled_back: bool = False
    rollback: RollbackOutcome = Field(default_factory=RollbackOutcome)


class CommitRequest(BaseModel):
    project: str = Field(min_length=1)
    message: str = Field(min_length=1)


class CommitResult(BaseModel):
    project: str
    success: bool
    message: str
    error: Optional[str] = None


class MultiCommitResult(BaseModel):
    results: List[CommitResult]
    total: int
    succeeded: int
    failed: int
