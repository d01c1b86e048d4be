# FILE: app/graph/progress.py
"""
Progress rollups.

- components_by_status(): complete / in progress / planned buckets per version
- layer_overview(): per-layer member counts, completions and mean progress

A component without a Version row for a tag counts as progress 0, planned.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional, Sequence

from app.architecture.entities import (
    CONTAINS,
    STATUS_PLANNED,
    Node,
    Version,
)
from app.architecture.repositories import ArchitectureRepos
from app.graph.ordering import step_totals_for, versions_for
from app.graph.results import ComponentStatus, LayerSummary, StatusBuckets
from config.graph_limits import TRACKED_VERSIONS

logger = logging.getLogger(__name__)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# =============================================================================
# Components by status
# =============================================================================

def classify(row: Optional[Version]) -> str:
    """Bucket name for a component's Version row (None = no row)."""
    if row is None:
        return "planned"
    if row.is_complete():
        return "complete"
    if 0 < row.progress < 100:
        return "in_progress"
    return "planned"


async def components_by_status(repos: ArchitectureRepos, version: str) -> StatusBuckets:
    nodes = await repos.nodes.find_all()
    all_versions = await repos.versions.find_all()
    all_features = await repos.features.find_all()

    rows = versions_for(all_versions, version)
    steps = step_totals_for(all_features, version)

    buckets = StatusBuckets()
    for node in nodes:
        if node.is_layer():
            continue
        row = rows.get(node.id)
        total_steps, feature_count = steps.get(node.id, (0, 0))
        entry = ComponentStatus(
            id=node.id,
            name=node.name,
            type=node.type,
            progress=row.progress if row else 0,
            status=row.status if row else STATUS_PLANNED,
            total_steps=total_steps,
            feature_count=feature_count,
        )
        getattr(buckets, classify(row)).append(entry)

    logger.debug(
        f"[graph.progress] {version}: {len(buckets.complete)} complete, "
        f"{len(buckets.in_progress)} in progress, {len(buckets.planned)} planned"
    )
    return buckets


# =============================================================================
# Layer overview
# =============================================================================

def layer_members(layer: Node, nodes: Dict[str, Node], contains_targets: List[str]) -> List[Node]:
    """Non-layer members: CONTAINS targets first, then nodes naming the layer."""
    members: List[Node] = []
    seen = set()
    for node_id in contains_targets:
        node = nodes.get(node_id)
        if node is None or node.is_layer() or node_id in seen:
            continue
        seen.add(node_id)
        members.append(node)
    for node in nodes.values():
        if node.layer == layer.id and not node.is_layer() and node.id not in seen:
            seen.add(node.id)
            members.append(node)
    return members


def summarise_layer(
    layer: Node,
    members: List[Node],
    versions_by_node: Dict[str, Dict[str, Version]],
    tracked: Sequence[str],
) -> LayerSummary:
    completed = {tag: 0 for tag in tracked}
    member_means: List[float] = []
    for member in members:
        rows = versions_by_node.get(member.id, {})
        progresses = []
        for tag in tracked:
            row = rows.get(tag)
            if row is not None and row.is_complete():
                completed[tag] += 1
            progresses.append(row.progress if row else 0)
        if progresses:
            member_means.append(sum(progresses) / len(progresses))

    overall = _round_half_up(sum(member_means) / len(member_means)) if member_means else 0
    return LayerSummary(
        layer_id=layer.id,
        layer_name=layer.name,
        total_components=len(members),
        completed=completed,
        overall_progress=overall,
    )


async def layer_overview(
    repos: ArchitectureRepos,
    tracked: Sequence[str] = TRACKED_VERSIONS,
) -> List[LayerSummary]:
    nodes = await repos.nodes.find_all()
    layers = [n for n in nodes if n.is_layer()]
    if not layers:
        return []

    contains_edges = await repos.edges.find_by_type(CONTAINS)
    all_versions = await repos.versions.find_all()

    node_map = {n.id: n for n in nodes}
    targets_by_layer: Dict[str, List[str]] = {}
    for edge in contains_edges:
        targets_by_layer.setdefault(edge.source_id, []).append(edge.target_id)

    versions_by_node: Dict[str, Dict[str, Version]] = {}
    for row in all_versions:
        versions_by_node.setdefault(row.node_id, {})[row.version] = row

    return [
        summarise_layer(
            layer,
            layer_members(layer, node_map, targets_by_layer.get(layer.id, [])),
            versions_by_node,
            tracked,
        )
        for layer in layers
    ]
