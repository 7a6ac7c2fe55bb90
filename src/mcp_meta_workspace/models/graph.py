# File: src/mcp_meta_workspace/models/graph.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class ImpactAnalysis(BaseModel):
    project: str
    direct_dependents: List[str] = Field(default_factory=list)
    transitive_dependents: List[str] = Field(default_factory=list)
    total_affected: int = 0


class ExecutionOrder(BaseModel):
    execution_order: List[str]
    count: int
    tag_filter: Optional[str] = None
    # only populated when cycles are tolerated
    skipped_cycles: List[str] = Field(default_factory=list)
