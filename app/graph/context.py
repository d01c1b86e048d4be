# FILE: app/graph/context.py
"""
Component Context - everything a coder needs about one component.

Aggregates the component, its versions enriched with step totals, features
grouped by version, one-hop dependencies and dependents, parent layer,
siblings, and a per-version progress map.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from app.architecture.entities import STATUS_PLANNED, Feature, Version
from app.architecture.errors import NodeNotFoundError
from app.architecture.repositories import ArchitectureRepos
from app.graph.results import ComponentContext
from app.graph.traversal import dependency_tree, dependents
from config.graph_limits import sorted_versions

logger = logging.getLogger(__name__)


async def enriched_versions(repos: ArchitectureRepos, node_id: str) -> List[Dict[str, Any]]:
    """
    Version rows for node_id with total_steps / feature_count attached.

    Tags that only appear on feature files are listed too, as progress 0,
    planned. Canonical tag order.
    """
    versions = await repos.versions.find_by_node(node_id)
    features = await repos.features.find_by_node(node_id)
    return await _enrich(repos, node_id, versions, features)


async def _enrich(
    repos: ArchitectureRepos,
    node_id: str,
    versions: List[Version],
    features: List[Feature],
) -> List[Dict[str, Any]]:
    rows = {v.version: v for v in versions}
    tags = sorted_versions(list(set(rows) | {f.version for f in features}))

    enriched: List[Dict[str, Any]] = []
    for tag in tags:
        row = rows.get(tag)
        summary = await repos.features.get_step_count_summary(node_id, tag)
        enriched.append({
            "version": tag,
            "progress": row.progress if row else 0,
            "status": row.status if row else STATUS_PLANNED,
            "total_steps": summary.total_steps,
            "feature_count": summary.feature_count,
        })
    return enriched


def group_features(features: List[Feature]) -> Dict[str, List[Dict[str, Any]]]:
    grouped: Dict[str, List[Dict[str, Any]]] = {}
    for feature in features:
        grouped.setdefault(feature.version, []).append({
            "filename": feature.filename,
            "title": feature.title,
            "step_count": feature.step_count,
        })
    return grouped


async def component_context(repos: ArchitectureRepos, node_id: str) -> ComponentContext:
    """
    Raises:
        NodeNotFoundError: node_id does not resolve
    """
    node = await repos.nodes.find_by_id(node_id)
    if node is None:
        raise NodeNotFoundError(node_id)

    versions = await repos.versions.find_by_node(node_id)
    features = await repos.features.find_by_node(node_id)
    versions_out = await _enrich(repos, node_id, versions, features)

    direct = await dependency_tree(repos, node_id, max_depth=1)
    inbound = await dependents(repos, node_id)

    layer_info = None
    siblings: List[Dict[str, Any]] = []
    if node.layer:
        layer_node = await repos.nodes.find_by_id(node.layer)
        if layer_node is not None:
            layer_info = layer_node.summary()
        else:
            logger.debug(f"[graph.context] {node_id} names missing layer {node.layer}")
        siblings = [n.summary() for n in await repos.nodes.find_by_layer(node.layer) if n.id != node_id]

    progress = {
        v["version"]: {
            "total_steps": v["total_steps"],
            "feature_count": v["feature_count"],
            "status": v["status"],
            "progress": v["progress"],
        }
        for v in versions_out
    }

    return ComponentContext(
        component={
            "id": node.id,
            "name": node.name,
            "type": node.type,
            "layer": node.layer,
            "description": node.description,
            "tags": list(node.tags),
        },
        versions=versions_out,
        features=group_features(features),
        dependencies=[d.to_dict() for d in direct],
        dependents=inbound,
        layer=layer_info,
        siblings=siblings,
        progress=progress,
    )
