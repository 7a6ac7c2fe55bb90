# File: src/mcp_meta_workspace/models/snapshot.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, Field


def _as_utc(v: Optional[datetime]) -> Optional[datetime]:
    # files written by older tools may carry a naive timestamp
    if v is not None and v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class SnapshotProject(BaseModel):
    name: str
    path: str
    branch: str = "main"
    commit: str = ""
    is_dirty: bool = False


class Snapshot(BaseModel):
    """
    On-disk record under <root>/.meta-snapshots/<sanitized name>.json
    """
    name: str = Field(min_length=1)
    created_at: UtcDatetime
    description: Optional[str] = None
    meta_dir: Optional[str] = None
    projects: List[SnapshotProject]


class SnapshotSummary(BaseModel):
    name: str
    created_at: Optional[UtcDatetime] = None
    description: Optional[str] = None
    projects_count: int = 0


class SnapshotCreated(BaseModel):
    status: Literal["created"] = "created"
    name: str
    path: str
    projects_count: int


class RestoreFailure(BaseModel):
    project: str
    error: str


class RestoreResult(BaseModel):
    snapshot: str
    status: Literal["success", "partial"]
    restored: List[str] = Field(default_factory=list)
    failed: List[RestoreFailure] = Field(default_factory=list)
    restored_count: int = 0
    failed_count: int = 0

    @classmethod
    def build(cls, snapshot: str, restored: List[str], failed: List[RestoreFailure]) -> "RestoreResult":
        return cls(
            snapshot=snapshot,
            status="success" if not failed else "partial",
            restored=restored,
            failed=failed,
            restored_count=len(restored),
            failed_count=len(failed),
        )
