# File: src/mcp_meta_workspace/models/git.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class BranchStatus(BaseModel):
    project: str
    branch: str
    tracking: Optional[str] = None
    ahead: int = 0
    behind: int = 0


class ProjectDiff(BaseModel):
    project: str
    diff: str


class GitCommandResult(BaseModel):
    """Outcome of one git command in one project (fetch, pull, push, add, commit, checkout)."""
    project: str
    success: bool
    output: str = ""
    error: Optional[str] = None
