# FILE: app/graph/snapshot.py
"""
Graph Snapshot Builder.

Loads nodes and edges through the repositories and indexes them by id and by
direction. Every engine call builds its own snapshot; nothing is cached.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from app.architecture.entities import Edge, Node
from app.architecture.repositories import ArchitectureRepos

logger = logging.getLogger(__name__)


@dataclass
class GraphSnapshot:
    nodes: Dict[str, Node] = field(default_factory=dict)
    outbound: Dict[str, List[Edge]] = field(default_factory=dict)
    inbound: Dict[str, List[Edge]] = field(default_factory=dict)
    edges: List[Edge] = field(default_factory=list)

    def __post_init__(self):
        # position of each edge object in `edges`
        self._rank = {id(e): i for i, e in enumerate(self.edges)}

    def get(self, node_id: str) -> Optional[Node]:
        return self.nodes.get(node_id)

    def neighbours(self, node_id: str) -> List[Tuple[str, Edge]]:
        """(other end, edge) for every edge touching node_id, in edge order."""
        touching = [(e.target_id, e) for e in self.outbound.get(node_id, [])]
        touching += [(e.source_id, e) for e in self.inbound.get(node_id, [])]
        return sorted(touching, key=lambda pair: self._rank[id(pair[1])])


def index_snapshot(nodes: List[Node], edges: List[Edge]) -> GraphSnapshot:
    """Assemble lookup maps; list order follows the input order."""
    outbound: Dict[str, List[Edge]] = defaultdict(list)
    inbound: Dict[str, List[Edge]] = defaultdict(list)
    for edge in edges:
        outbound[edge.source_id].append(edge)
        inbound[edge.target_id].append(edge)
    return GraphSnapshot(
        nodes={n.id: n for n in nodes},
        outbound=dict(outbound),
        inbound=dict(inbound),
        edges=list(edges),
    )


async def build_snapshot(repos: ArchitectureRepos, relationships_only: bool = False) -> GraphSnapshot:
    """Load every node and every edge (or every non-CONTAINS edge) into a snapshot."""
    nodes = await repos.nodes.find_all()
    if relationships_only:
        edges = await repos.edges.find_relationships()
    else:
        edges = await repos.edges.find_all()
    logger.debug(f"[graph.snapshot] Loaded {len(nodes)} nodes, {len(edges)} edges")
    return index_snapshot(nodes, edges)
