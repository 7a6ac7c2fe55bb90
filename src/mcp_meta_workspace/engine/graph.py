# File: src/mcp_meta_workspace/engine/graph.py
"""
Dependency graph over workspace projects.

`edges[name]` lists what a project depends on (manifest order),
`reverse_edges[name]` lists what depends on it. A `depends_on` entry may
name a project directly or a capability another project `provides`; names
resolving to neither are kept as dangling edges and never visited as nodes.
"""
from __future__ import annotations

from collections import deque
from typing import Deque, Dict, Iterable, List, Optional, Set, Tuple

from ..errors import CycleError
from ..logging import get_logger
from ..models.graph import ExecutionOrder, ImpactAnalysis
from ..models.project import ProjectDescriptor

log = get_logger("mcp.meta.graph")


class DependencyGraph:
    def __init__(
        self,
        nodes: Dict[str, ProjectDescriptor],
        edges: Dict[str, List[str]],
        reverse_edges: Dict[str, List[str]],
        providers: Optional[Dict[str, str]] = None,
    ):
        self.nodes = nodes
        self.edges = edges
        self.reverse_edges = reverse_edges
        self.providers = providers or {}

    @classmethod
    def build(cls, projects: Iterable[ProjectDescriptor]) -> "DependencyGraph":
        nodes: Dict[str, ProjectDescriptor] = {}
        for p in projects:
            nodes[p.name] = p

        providers: Dict[str, str] = {}
        for p in nodes.values():
            for cap in p.provides:
                if cap in providers and providers[cap] != p.name:
                    log.warning("graph.provides.duplicate", capability=cap,
                                first=providers[cap], ignored=p.name)
                    continue
                providers[cap] = p.name

        def resolve(dep: str) -> str:
            if dep in nodes:
                return dep
            return providers.get(dep, dep)

        edges: Dict[str, List[str]] = {}
        reverse_edges: Dict[str, List[str]] = {}
        for name, p in nodes.items():
            deps = [resolve(d) for d in p.depends_on]
            edges[name] = deps
            for d in deps:
                reverse_edges.setdefault(d, []).append(name)

        dangling = sorted({d for deps in edges.values() for d in deps if d not in nodes})
        if dangling:
            log.info("graph.dangling_dependencies", names=dangling)
        return cls(nodes, edges, reverse_edges, providers)

    def dependencies_of(self, name: str) -> List[str]:
        return list(self.edges.get(name, []))

    def dependents_of(self, name: str) -> List[str]:
        return list(self.reverse_edges.get(name, []))

    # ---------- impact ----------

    def analyze_impact(self, project_name: str) -> ImpactAnalysis:
        """
        Breadth-first walk over reverse edges. Every node is visited at most
        once, so cycles terminate; the origin itself is never counted.
        """
        direct: List[str] = []
        transitive: List[str] = []
        visited: Set[str] = {project_name}
        queue: Deque[Tuple[str, int]] = deque()

        for d in self.dependents_of(project_name):
            if d in visited:
                continue
            visited.add(d)
            direct.append(d)
            queue.append((d, 1))

        while queue:
            current, depth = queue.popleft()
            for d in self.dependents_of(current):
                if d in visited:
                    continue
                visited.add(d)
                transitive.append(d)
                queue.append((d, depth + 1))

        return ImpactAnalysis(
            project=project_name,
            direct_dependents=direct,
            transitive_dependents=transitive,
            total_affected=len(direct) + len(transitive),
        )

    # ---------- ordering ----------

    def execution_order(
        self,
        tags: Optional[Iterable[str]] = None,
        strict: bool = True,
    ) -> ExecutionOrder:
        """
        Kahn's algorithm: dependencies come before dependents.

        The tag filter only decides what is emitted; filtered-out projects are
        still processed so their dependents are released in order. Dangling
        dependencies count as already satisfied.

        Raises:
            CycleError: if strict and some projects can never be released
        """
        wanted = [t for t in (tags or []) if t]

        in_degree: Dict[str, int] = {
            name: sum(1 for d in deps if d in self.nodes)
            for name, deps in self.edges.items()
        }
        queue: Deque[str] = deque(n for n in self.nodes if in_degree[n] == 0)
        order: List[str] = []
        processed: Set[str] = set()

        while queue:
            current = queue.popleft()
            processed.add(current)
            if not wanted or any(t in self.nodes[current].tags for t in wanted):
                order.append(current)
            for dependent in self.dependents_of(current):
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    queue.append(dependent)

        leftover = [n for n in self.nodes if n not in processed]
        if leftover:
            members = self.find_cycle_members(leftover)
            log.warning("graph.cycle", members=members, blocked=leftover)
            if strict:
                raise CycleError(members or leftover)

        tag_filter = ",".join(wanted) if wanted else None
        return ExecutionOrder(
            execution_order=order,
            count=len(order),
            tag_filter=tag_filter,
            skipped_cycles=leftover,
        )

    def find_cycle_members(self, candidates: Optional[Iterable[str]] = None) -> List[str]:
        """Projects that can reach themselves through dependency edges."""
        scope = list(candidates) if candidates is not None else list(self.nodes)
        members: List[str] = []
        for start in scope:
            seen: Set[str] = set()
            stack = [d for d in self.dependencies_of(start) if d in self.nodes]
            while stack:
                n = stack.pop()
                if n == start:
                    members.append(start)
                    break
                if n in seen:
                    continue
                seen.add(n)
                stack.extend(d for d in self.dependencies_of(n) if d in self.nodes)
        return members
