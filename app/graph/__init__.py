# FILE: app/graph/__init__.py
"""
Architecture graph query engine.

Read-only algorithms over a freshly loaded snapshot of the architecture
store. Every function takes an ArchitectureRepos bundle as its first argument
and recomputes from scratch on each call.
"""

from .snapshot import GraphSnapshot, build_snapshot, index_snapshot
from .traversal import dependency_tree, dependents, shortest_path, neighbourhood
from .ordering import implementation_order, next_implementable
from .progress import components_by_status, layer_overview
from .context import component_context, enriched_versions

from .results import (
    TreeNode,
    ResolvedNode,
    PlaceholderNode,
    EdgeRef,
    PathResult,
    NeighbourhoodResult,
    OrderResult,
    ComponentStatus,
    StatusBuckets,
    ImplementableComponent,
    LayerSummary,
    ComponentContext,
)

__all__ = [
    "GraphSnapshot",
    "build_snapshot",
    "index_snapshot",
    "dependency_tree",
    "dependents",
    "shortest_path",
    "neighbourhood",
    "implementation_order",
    "next_implementable",
    "components_by_status",
    "layer_overview",
    "component_context",
    "enriched_versions",
    "TreeNode",
    "ResolvedNode",
    "PlaceholderNode",
    "EdgeRef",
    "PathResult",
    "NeighbourhoodResult",
    "OrderResult",
    "ComponentStatus",
    "StatusBuckets",
    "ImplementableComponent",
    "LayerSummary",
    "ComponentContext",
]
