# FILE: app/graph/traversal.py
"""
Traversal queries over the architecture graph.

- dependency_tree(): outbound DEPENDS_ON expansion to a bounded depth
- dependents(): single-hop inbound DEPENDS_ON lookup
- shortest_path(): unweighted BFS between two nodes over relationship edges
- neighbourhood(): bounded BFS subgraph around a center node

CONTAINS edges never take part in traversal. Dangling edges (pointing at a
deleted node) are skipped or rendered as placeholders; they never raise.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Dict, List, Optional, Tuple

from app.architecture.entities import Edge, Node
from app.architecture.repositories import ArchitectureRepos
from app.graph.results import (
    EdgeRef,
    NeighbourhoodResult,
    PathNode,
    PathResult,
    PlaceholderNode,
    ResolvedNode,
    TreeNode,
)
from app.graph.snapshot import GraphSnapshot, build_snapshot

logger = logging.getLogger(__name__)


class _NodeLookup:
    """Per-call memo of find_by_id and find_by_source results (misses included)."""

    def __init__(self, repos: ArchitectureRepos):
        self._repos = repos
        self._seen: Dict[str, Optional[Node]] = {}
        self._outbound: Dict[str, List[Edge]] = {}

    async def get(self, node_id: str) -> Optional[Node]:
        if node_id not in self._seen:
            self._seen[node_id] = await self._repos.nodes.find_by_id(node_id)
        return self._seen[node_id]

    async def outbound(self, node_id: str) -> List[Edge]:
        if node_id not in self._outbound:
            self._outbound[node_id] = await self._repos.edges.find_by_source(node_id)
        return self._outbound[node_id]


# =============================================================================
# Dependency tree
# =============================================================================

async def dependency_tree(repos: ArchitectureRepos, root_id: str, max_depth: int = 1) -> List[TreeNode]:
    """
    Expand outbound DEPENDS_ON edges from root_id up to max_depth levels.

    Uses an explicit stack instead of recursion. Each frame carries the ids
    on its own root path; a dependency already on that path is listed but not
    expanded again, so cycles terminate without error.

    Returns:
        Direct dependencies of root_id as TreeNode entries. Entries at the
        depth limit keep dependencies=None.
    """
    if max_depth < 1:
        return []

    lookup = _NodeLookup(repos)
    result: List[TreeNode] = []
    # (node id, depth of its children, ids on the path so far, list to fill)
    stack: List[Tuple[str, int, frozenset, List[TreeNode]]] = [
        (root_id, 1, frozenset([root_id]), result)
    ]

    while stack:
        node_id, depth, path, out = stack.pop()
        out_edges = await lookup.outbound(node_id)
        for edge in out_edges:
            if not edge.is_dependency():
                continue
            target = await lookup.get(edge.target_id)
            if target is None:
                logger.debug(f"[graph.traversal] Skipping dangling dependency {node_id} -> {edge.target_id}")
                continue
            entry = TreeNode(id=target.id, name=target.name, type=target.type)
            out.append(entry)
            if depth >= max_depth:
                continue
            if target.id in path:
                logger.debug(f"[graph.traversal] Cycle back to {target.id} under {root_id}, not expanding")
                continue
            entry.dependencies = []
            stack.append((target.id, depth + 1, path | {target.id}, entry.dependencies))

    return result


# =============================================================================
# Dependents
# =============================================================================

async def dependents(repos: ArchitectureRepos, node_id: str) -> List[Dict[str, str]]:
    """Components with a DEPENDS_ON edge into node_id (one hop only)."""
    lookup = _NodeLookup(repos)
    in_edges = await repos.edges.find_by_target(node_id)
    found: List[Dict[str, str]] = []
    for edge in in_edges:
        if not edge.is_dependency():
            continue
        source = await lookup.get(edge.source_id)
        if source is None:
            continue
        found.append(source.summary())
    return found


# =============================================================================
# Shortest path
# =============================================================================

def _path_node(node_id: str, snapshot: GraphSnapshot) -> PathNode:
    node = snapshot.get(node_id)
    if node is None:
        return PlaceholderNode(id=node_id)
    return ResolvedNode(id=node.id, name=node.name, type=node.type)


async def shortest_path(repos: ArchitectureRepos, from_id: str, to_id: str) -> PathResult:
    """
    Unweighted shortest path between two nodes over relationship edges.

    Edges are walked in both directions. Among equal-length paths the one
    discovered first wins, following repository edge order (ascending id).
    Returns an empty PathResult when no path exists.
    """
    if from_id == to_id:
        node = await repos.nodes.find_by_id(from_id)
        if node is None:
            return PathResult()
        return PathResult(path=[ResolvedNode(id=node.id, name=node.name, type=node.type)])

    snapshot = await build_snapshot(repos, relationships_only=True)

    parent: Dict[str, Tuple[str, Edge]] = {}
    visited = {from_id}
    queue = deque([from_id])
    while queue:
        current = queue.popleft()
        if current == to_id:
            break
        for neighbour, edge in snapshot.neighbours(current):
            if neighbour in visited:
                continue
            visited.add(neighbour)
            parent[neighbour] = (current, edge)
            queue.append(neighbour)

    if to_id not in parent:
        return PathResult()

    ids: List[str] = [to_id]
    edges: List[EdgeRef] = []
    current = to_id
    while current != from_id:
        previous, edge = parent[current]
        edges.append(EdgeRef(source_id=edge.source_id, target_id=edge.target_id, type=edge.type))
        ids.append(previous)
        current = previous
    ids.reverse()
    edges.reverse()

    path = [_path_node(node_id, snapshot) for node_id in ids]
    placeholders = [n.id for n in path if n.is_placeholder]
    if placeholders:
        logger.info(f"[graph.traversal] Path {from_id} -> {to_id} crosses missing nodes: {placeholders}")
    return PathResult(path=path, edges=edges)


# =============================================================================
# Neighbourhood
# =============================================================================

async def neighbourhood(repos: ArchitectureRepos, center_id: str, hops: int = 1) -> NeighbourhoodResult:
    """
    Nodes within `hops` steps of center_id (either edge direction) and every
    relationship edge between them.

    Ids that do not resolve to a stored node are neither returned nor
    traversed through.
    """
    snapshot = await build_snapshot(repos, relationships_only=True)
    if center_id not in snapshot.nodes:
        return NeighbourhoodResult()

    reached: List[str] = [center_id]
    seen = {center_id}
    frontier = [center_id]
    for _ in range(max(hops, 0)):
        next_frontier: List[str] = []
        for current in frontier:
            for neighbour, _edge in snapshot.neighbours(current):
                if neighbour in seen or neighbour not in snapshot.nodes:
                    continue
                seen.add(neighbour)
                reached.append(neighbour)
                next_frontier.append(neighbour)
        if not next_frontier:
            break
        frontier = next_frontier

    nodes = [
        ResolvedNode(id=snapshot.nodes[n].id, name=snapshot.nodes[n].name, type=snapshot.nodes[n].type)
        for n in reached
    ]
    edges = [
        EdgeRef(source_id=e.source_id, target_id=e.target_id, type=e.type)
        for e in snapshot.edges
        if e.source_id in seen and e.target_id in seen
    ]
    return NeighbourhoodResult(nodes=nodes, edges=edges)
