# FILE: app/architecture/entities.py
"""
Domain entities for the architecture graph.

Repositories hand these plain dataclasses to the graph engine so that the
algorithms never touch SQLAlchemy rows or sessions.

Node types:    layer, component, store, external, phase, app, mcp
Edge types:    CONTAINS (layer -> member grouping) plus functional relationships
Version tags:  overview, mvp, v1, v2
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

# =============================================================================
# Closed type sets
# =============================================================================

NODE_TYPES: Tuple[str, ...] = ("layer", "component", "store", "external", "phase", "app", "mcp")

EDGE_TYPES: Tuple[str, ...] = (
    "CONTAINS",
    "CONTROLS",
    "DEPENDS_ON",
    "READS_FROM",
    "WRITES_TO",
    "DISPATCHES_TO",
    "ESCALATES_TO",
    "PROXIES",
    "SANITISES",
    "GATES",
    "SEQUENCE",
)

CONTAINS = "CONTAINS"
DEPENDS_ON = "DEPENDS_ON"

VERSION_STATUSES: Tuple[str, ...] = ("planned", "in-progress", "complete")

STATUS_PLANNED = "planned"
STATUS_IN_PROGRESS = "in-progress"
STATUS_COMPLETE = "complete"

NODE_ID_RE = re.compile(r"^[a-z][a-z0-9]*(?:-[a-z0-9]+)*$")
MAX_NODE_ID_LENGTH = 64

_STEP_RE = re.compile(r"^\s*(Given|When|Then|And|But)\s+", re.MULTILINE)
_FEATURE_TITLE_RE = re.compile(r"^Feature:\s*(.+)$", re.MULTILINE)
_VALID_FEATURE_RE = re.compile(r"^Feature:\s*\S", re.MULTILINE)


# =============================================================================
# Entities
# =============================================================================

@dataclass(frozen=True)
class Node:
    """A vertex in the architecture graph."""
    id: str
    name: str
    type: str
    layer: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    sort_order: int = 0
    current_version: Optional[str] = None

    def is_layer(self) -> bool:
        return self.type == "layer"

    def summary(self) -> dict:
        return {"id": self.id, "name": self.name, "type": self.type}


@dataclass(frozen=True)
class Edge:
    """A typed, directed relationship between two nodes."""
    source_id: str
    target_id: str
    type: str
    id: Optional[int] = None
    label: Optional[str] = None
    metadata: Optional[str] = None

    def is_dependency(self) -> bool:
        return self.type == DEPENDS_ON


@dataclass(frozen=True)
class Version:
    """Progress record for one (node, version tag)."""
    node_id: str
    version: str
    progress: int = 0
    status: str = STATUS_PLANNED
    content: Optional[str] = None
    updated_at: Optional[str] = None
    id: Optional[int] = None

    def is_complete(self) -> bool:
        return self.status == STATUS_COMPLETE or self.progress >= 100


@dataclass(frozen=True)
class StepSummary:
    """Aggregated Gherkin step count for one (node, version)."""
    total_steps: int = 0
    feature_count: int = 0


@dataclass(frozen=True)
class Feature:
    """A Gherkin feature file linked to a node and version."""
    node_id: str
    version: str
    filename: str
    title: str
    content: Optional[str] = None
    step_count: int = 0
    updated_at: Optional[str] = None
    id: Optional[int] = None

    @staticmethod
    def count_steps(content: str) -> int:
        """Count Given/When/Then/And/But step lines."""
        return len(_STEP_RE.findall(content or ""))

    @staticmethod
    def title_from_content(content: str, fallback_filename: str) -> str:
        match = _FEATURE_TITLE_RE.search(content or "")
        if match:
            return match.group(1).strip()
        return fallback_filename.replace(".feature", "")

    @staticmethod
    def has_valid_gherkin(content: str) -> bool:
        return bool(_VALID_FEATURE_RE.search(content or ""))


def status_for_progress(progress: int) -> str:
    """Status implied by a progress value when the caller does not give one."""
    if progress >= 100:
        return STATUS_COMPLETE
    if progress > 0:
        return STATUS_IN_PROGRESS
    return STATUS_PLANNED
