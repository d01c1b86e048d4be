# FILE: app/graph/results.py
"""
Typed result structures returned by the graph query engine.

Routes call `to_dict()` on these; the engine itself never builds ad hoc dicts
for values whose shape carries meaning (optional fields, placeholder nodes,
order-vs-cycle).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass
class TreeNode:
    """One dependency in a dependency tree.

    `dependencies` is None when the node sits at the depth limit and was not
    expanded; an empty list means it was expanded and has none.
    """
    id: str
    name: str
    type: str
    dependencies: Optional[List["TreeNode"]] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.id, "name": self.name, "type": self.type}
        if self.dependencies is not None:
            out["dependencies"] = [child.to_dict() for child in self.dependencies]
        return out


@dataclass(frozen=True)
class ResolvedNode:
    id: str
    name: str
    type: str

    @property
    def is_placeholder(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "type": self.type}


@dataclass(frozen=True)
class PlaceholderNode:
    """Stand-in for a path id whose node no longer exists."""
    id: str

    @property
    def name(self) -> str:
        return self.id

    @property
    def type(self) -> str:
        return "unknown"

    @property
    def is_placeholder(self) -> bool:
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "type": self.type}


PathNode = Union[ResolvedNode, PlaceholderNode]


@dataclass(frozen=True)
class EdgeRef:
    source_id: str
    target_id: str
    type: str

    def to_dict(self) -> Dict[str, Any]:
        return {"source_id": self.source_id, "target_id": self.target_id, "type": self.type}


@dataclass
class PathResult:
    path: List[PathNode] = field(default_factory=list)
    edges: List[EdgeRef] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": [n.to_dict() for n in self.path],
            "edges": [e.to_dict() for e in self.edges],
        }


@dataclass
class NeighbourhoodResult:
    nodes: List[ResolvedNode] = field(default_factory=list)
    edges: List[EdgeRef] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }


@dataclass
class OrderResult:
    """Either a build order or the witness cycle, never both."""
    order: Optional[List[str]] = None
    cycle: Optional[List[str]] = None

    def __post_init__(self):
        if (self.order is None) == (self.cycle is None):
            raise ValueError("OrderResult needs exactly one of order or cycle")

    @property
    def has_cycle(self) -> bool:
        return self.cycle is not None

    def to_dict(self) -> Dict[str, Any]:
        if self.cycle is not None:
            return {"cycle": list(self.cycle)}
        return {"order": list(self.order or [])}


@dataclass
class ComponentStatus:
    id: str
    name: str
    type: str
    progress: int
    status: str
    total_steps: int
    feature_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "progress": self.progress,
            "status": self.status,
            "total_steps": self.total_steps,
            "feature_count": self.feature_count,
        }


@dataclass
class StatusBuckets:
    complete: List[ComponentStatus] = field(default_factory=list)
    in_progress: List[ComponentStatus] = field(default_factory=list)
    planned: List[ComponentStatus] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "complete": [c.to_dict() for c in self.complete],
            "in_progress": [c.to_dict() for c in self.in_progress],
            "planned": [c.to_dict() for c in self.planned],
        }


@dataclass
class ImplementableComponent:
    id: str
    name: str
    type: str
    progress: int
    total_steps: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "progress": self.progress,
            "total_steps": self.total_steps,
        }


@dataclass
class LayerSummary:
    layer_id: str
    layer_name: str
    total_components: int
    completed: Dict[str, int]
    overall_progress: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "layer_id": self.layer_id,
            "layer_name": self.layer_name,
            "total_components": self.total_components,
            "completed": dict(self.completed),
            "completed_mvp": self.completed.get("mvp", 0),
            "completed_v1": self.completed.get("v1", 0),
            "overall_progress": self.overall_progress,
        }


@dataclass
class ComponentContext:
    component: Dict[str, Any]
    versions: List[Dict[str, Any]]
    features: Dict[str, List[Dict[str, Any]]]
    dependencies: List[Dict[str, Any]]
    dependents: List[Dict[str, Any]]
    layer: Optional[Dict[str, Any]]
    siblings: List[Dict[str, Any]]
    progress: Dict[str, Dict[str, Any]]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "component": self.component,
            "versions": self.versions,
            "features": self.features,
            "dependencies": self.dependencies,
            "dependents": self.dependents,
            "layer": self.layer,
            "siblings": self.siblings,
            "progress": self.progress,
        }
