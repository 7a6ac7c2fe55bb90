# File: src/mcp_meta_workspace/engine/query.py
"""
Conjunctive filter language over repo facts, e.g.

    dirty:true AND tag:backend AND branch:main

Conjuncts without ':' are dropped; unknown fields always match.
"""
from __future__ import annotations

import re
from typing import Callable, Dict, List

from ..models.repo_state import QueryCondition, RepoState

_AND_RE = re.compile(r" and ", re.IGNORECASE)

_TRUE = {"true", "yes", "y", "1", "on"}


def _truthy(v: str) -> bool:
    return v.strip().lower() in _TRUE


_MATCHERS: Dict[str, Callable[[RepoState, str], bool]] = {
    "dirty": lambda s, v: s.is_dirty == _truthy(v),
    "branch": lambda s, v: s.branch == v,
    "tag": lambda s, v: v in s.tags,
    "ahead": lambda s, v: (s.ahead > 0) == _truthy(v),
    "behind": lambda s, v: (s.behind > 0) == _truthy(v),
}

KNOWN_FIELDS = tuple(_MATCHERS)


class Query:
    def __init__(self, text: str, conditions: List[QueryCondition]):
        self.text = text
        self.conditions = conditions

    @classmethod
    def parse(cls, text: str) -> "Query":
        conditions: List[QueryCondition] = []
        for part in _AND_RE.split(text or ""):
            part = part.strip()
            if ":" not in part:
                continue
            field, value = part.split(":", 1)
            conditions.append(QueryCondition(field=field.strip().lower(), value=value.strip()))
        return cls(text, conditions)

    def unknown_fields(self) -> List[str]:
        return [c.field for c in self.conditions if c.field not in KNOWN_FIELDS]

    def matches(self, state: RepoState) -> bool:
        for c in self.conditions:
            matcher = _MATCHERS.get(c.field)
            if matcher is not None and not matcher(state, c.value):
                return False
        return True
