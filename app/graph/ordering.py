# FILE: app/graph/ordering.py
"""
Build-order queries over the DEPENDS_ON subgraph.

Only non-layer nodes take part. A DEPENDS_ON edge counts only when both its
endpoints are non-layer nodes that exist; edges aimed at layers or at deleted
nodes are ignored.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Iterator, List, Set, Tuple

from app.architecture.entities import DEPENDS_ON, Edge, Feature, Version
from app.architecture.repositories import ArchitectureRepos
from app.graph.results import ImplementableComponent, OrderResult

logger = logging.getLogger(__name__)


class Mark(Enum):
    """DFS node state. IN_PROGRESS means the node is on the current DFS path."""
    UNVISITED = "unvisited"
    IN_PROGRESS = "in_progress"
    DONE = "done"


def dependency_map(component_ids: List[str], edges: List[Edge]) -> Dict[str, List[str]]:
    """Map each component to the components it depends on, in edge order."""
    members: Set[str] = set(component_ids)
    deps: Dict[str, List[str]] = {cid: [] for cid in component_ids}
    for edge in edges:
        if not edge.is_dependency():
            continue
        if edge.source_id not in members or edge.target_id not in members:
            continue
        deps[edge.source_id].append(edge.target_id)
    return deps


def topological_order(component_ids: List[str], deps: Dict[str, List[str]]) -> OrderResult:
    """
    Three-colour iterative DFS.

    Dependencies are emitted before their dependents. The first back edge
    found stops the walk and the DFS path from the repeated node onwards is
    returned, closed by the repeated node: [x, ..., x].
    """
    marks: Dict[str, Mark] = {cid: Mark.UNVISITED for cid in component_ids}
    order: List[str] = []

    for root in component_ids:
        if marks[root] is not Mark.UNVISITED:
            continue
        marks[root] = Mark.IN_PROGRESS
        path: List[str] = [root]
        stack: List[Tuple[str, Iterator[str]]] = [(root, iter(deps.get(root, [])))]

        while stack:
            node_id, pending = stack[-1]
            descended = False
            for dep in pending:
                mark = marks[dep]
                if mark is Mark.IN_PROGRESS:
                    start = path.index(dep)
                    return OrderResult(cycle=path[start:] + [dep])
                if mark is Mark.UNVISITED:
                    marks[dep] = Mark.IN_PROGRESS
                    path.append(dep)
                    stack.append((dep, iter(deps.get(dep, []))))
                    descended = True
                    break
            if descended:
                continue
            stack.pop()
            path.pop()
            marks[node_id] = Mark.DONE
            order.append(node_id)

    return OrderResult(order=order)


async def implementation_order(repos: ArchitectureRepos) -> OrderResult:
    """Topological build order of all non-layer components, or a witness cycle."""
    nodes = await repos.nodes.find_all()
    edges = await repos.edges.find_by_type(DEPENDS_ON)
    component_ids = [n.id for n in nodes if not n.is_layer()]

    result = topological_order(component_ids, dependency_map(component_ids, edges))
    if result.has_cycle:
        logger.warning(f"[graph.ordering] Dependency cycle detected: {' -> '.join(result.cycle)}")
    return result


# =============================================================================
# Next implementable
# =============================================================================

def versions_for(all_versions: List[Version], version: str) -> Dict[str, Version]:
    return {v.node_id: v for v in all_versions if v.version == version}


def step_totals_for(all_features: List[Feature], version: str) -> Dict[str, Tuple[int, int]]:
    """node id -> (total steps, feature count) for one version tag."""
    totals: Dict[str, Tuple[int, int]] = {}
    for feature in all_features:
        if feature.version != version:
            continue
        steps, count = totals.get(feature.node_id, (0, 0))
        totals[feature.node_id] = (steps + feature.step_count, count + 1)
    return totals


async def next_implementable(repos: ArchitectureRepos, version: str) -> List[ImplementableComponent]:
    """
    Components not yet complete for `version` whose every non-layer
    DEPENDS_ON target is complete. Components without such targets qualify.
    """
    nodes = await repos.nodes.find_all()
    edges = await repos.edges.find_by_type(DEPENDS_ON)
    all_versions = await repos.versions.find_all()
    all_features = await repos.features.find_all()

    components = [n for n in nodes if not n.is_layer()]
    component_ids = [n.id for n in components]
    deps = dependency_map(component_ids, edges)
    rows = versions_for(all_versions, version)
    steps = step_totals_for(all_features, version)

    def is_complete(node_id: str) -> bool:
        row = rows.get(node_id)
        return row is not None and row.is_complete()

    ready: List[ImplementableComponent] = []
    for node in components:
        if is_complete(node.id):
            continue
        if not all(is_complete(dep) for dep in deps[node.id]):
            continue
        row = rows.get(node.id)
        ready.append(ImplementableComponent(
            id=node.id,
            name=node.name,
            type=node.type,
            progress=row.progress if row else 0,
            total_steps=steps.get(node.id, (0, 0))[0],
        ))
    return ready
