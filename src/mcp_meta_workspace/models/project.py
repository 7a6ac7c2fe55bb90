# File: src/mcp_meta_workspace/models/project.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProjectDescriptor(BaseModel):
    """
    One project declared in the workspace manifest:
      - name: unique key
      - path: relative to the workspace root
      - tags: labels used for filtering (set semantics, first-seen order kept)
      - provides / depends_on: dependency-graph relations
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    path: str = Field(min_length=1)
    repo: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    provides: List[str] = Field(default_factory=list)
    depends_on: List[str] = Field(default_factory=list)

    @field_validator("tags", mode="after")
    @classmethod
    def _dedupe_tags(cls, v: List[str]) -> List[str]:
        return list(dict.fromkeys(t.strip() for t in v if t and t.strip()))

    def has_tag(self, tag: Optional[str]) -> bool:
        # no tag, or an empty one, selects everything
        return not tag or tag in self.tags
