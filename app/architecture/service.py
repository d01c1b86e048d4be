# FILE: app/architecture/service.py
"""
Management operations for the architecture graph.

Creates, updates, moves and deletes components, layers and edges, records
version progress, and stores, reads and deletes Gherkin feature files. Also
serves the plain read models (component listing, edges per component, the
full architecture dump). The graph query engine (app.graph) is read-only;
every write goes through here.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from app.architecture.entities import (
    CONTAINS,
    EDGE_TYPES,
    MAX_NODE_ID_LENGTH,
    NODE_ID_RE,
    NODE_TYPES,
    Edge,
    Feature,
    Node,
    StepSummary,
    Version,
    status_for_progress,
    VERSION_STATUSES,
)
from app.architecture.errors import (
    EdgeExistsError,
    EdgeNotFoundError,
    FeatureNotFoundError,
    NodeExistsError,
    NodeNotFoundError,
    ValidationError,
)
from app.architecture.repositories import ArchitectureRepos
from app.graph.context import enriched_versions, group_features
from config.graph_limits import is_known_version

logger = logging.getLogger(__name__)


# ============== COMPONENTS ==============

def validate_node_id(node_id: str) -> None:
    if len(node_id) > MAX_NODE_ID_LENGTH:
        raise ValidationError(
            f"Invalid id: must be {MAX_NODE_ID_LENGTH} characters or fewer (got {len(node_id)})"
        )
    if not NODE_ID_RE.match(node_id):
        raise ValidationError(f'Invalid id format: must be kebab-case (got "{node_id}")')


async def create_component(
    repos: ArchitectureRepos,
    node_id: str,
    name: str,
    node_type: str,
    layer: Optional[str] = None,
    description: Optional[str] = None,
    tags: Optional[List[str]] = None,
    color: Optional[str] = None,
    icon: Optional[str] = None,
    sort_order: int = 0,
) -> Node:
    """
    Create a node. When `layer` is given the layer must exist and be of type
    layer, and a `layer CONTAINS node` edge is created alongside.
    """
    validate_node_id(node_id)
    if not name or not name.strip():
        raise ValidationError("Invalid name: name must not be empty")
    if node_type not in NODE_TYPES:
        raise ValidationError(f"Invalid node type: {node_type}")
    if await repos.nodes.exists(node_id):
        raise NodeExistsError(node_id)

    if layer:
        layer_node = await repos.nodes.find_by_id(layer)
        if layer_node is None:
            raise NodeNotFoundError(layer)
        if not layer_node.is_layer():
            raise ValidationError(f"Node {layer} is not a layer")

    node = await repos.nodes.save(Node(
        id=node_id,
        name=name.strip(),
        type=node_type,
        layer=layer or None,
        tags=list(tags or []),
        description=description,
        color=color,
        icon=icon,
        sort_order=sort_order,
    ))
    if layer:
        await repos.edges.save(Edge(source_id=layer, target_id=node_id, type=CONTAINS))

    logger.info(f"[architecture.service] Created {node_type} {node_id}" + (f" in {layer}" if layer else ""))
    return node


async def get_component(repos: ArchitectureRepos, node_id: str) -> Node:
    node = await repos.nodes.find_by_id(node_id)
    if node is None:
        raise NodeNotFoundError(node_id)
    return node


async def list_components(
    repos: ArchitectureRepos,
    node_type: Optional[str] = None,
    layer: Optional[str] = None,
    tag: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Node]:
    """Non-layer nodes in repository order, narrowed by every filter given."""
    needle = search.lower() if search else None
    found: List[Node] = []
    for node in await repos.nodes.find_all():
        if node.is_layer():
            continue
        if node_type and node.type != node_type:
            continue
        if layer and node.layer != layer:
            continue
        if tag and tag not in node.tags:
            continue
        if needle and needle not in node.name.lower():
            continue
        found.append(node)
    return found


async def update_component(
    repos: ArchitectureRepos,
    node_id: str,
    name: Optional[str] = None,
    description: Optional[str] = None,
    tags: Optional[List[str]] = None,
    color: Optional[str] = None,
    icon: Optional[str] = None,
    sort_order: Optional[int] = None,
) -> Node:
    """
    Merge-patch a node: fields left as None keep their stored value.

    Type and layer are not editable here; use move_component for the layer.
    """
    node = await get_component(repos, node_id)
    if name is not None and not name.strip():
        raise ValidationError("Invalid name: name must not be empty")

    merged = replace(
        node,
        name=name.strip() if name is not None else node.name,
        description=description if description is not None else node.description,
        tags=list(tags) if tags is not None else list(node.tags),
        color=color if color is not None else node.color,
        icon=icon if icon is not None else node.icon,
        sort_order=sort_order if sort_order is not None else node.sort_order,
    )
    saved = await repos.nodes.save(merged)
    logger.info(f"[architecture.service] Updated {node_id}")
    return saved


async def delete_component(repos: ArchitectureRepos, node_id: str) -> None:
    """Delete a node with its edges, versions and features."""
    if not await repos.nodes.exists(node_id):
        raise NodeNotFoundError(node_id)
    edge_count = await repos.edges.delete_touching(node_id)
    version_count = await repos.versions.delete_by_node(node_id)
    feature_count = await repos.features.delete_by_node(node_id)
    await repos.nodes.delete(node_id)
    logger.info(
        f"[architecture.service] Deleted {node_id} "
        f"({edge_count} edges, {version_count} versions, {feature_count} features)"
    )


# ============== LAYERS ==============

async def list_layers(repos: ArchitectureRepos) -> List[Node]:
    return await repos.nodes.find_by_type("layer")


async def get_layer(repos: ArchitectureRepos, layer_id: str) -> Tuple[Node, List[Node]]:
    """The layer node and the nodes whose `layer` field names it."""
    node = await repos.nodes.find_by_id(layer_id)
    if node is None or not node.is_layer():
        raise NodeNotFoundError(layer_id)
    return node, await repos.nodes.find_by_layer(layer_id)


async def create_layer(
    repos: ArchitectureRepos,
    layer_id: str,
    name: str,
    description: Optional[str] = None,
    color: Optional[str] = None,
    icon: Optional[str] = None,
    sort_order: int = 0,
) -> Node:
    return await create_component(
        repos,
        layer_id,
        name,
        "layer",
        description=description,
        color=color,
        icon=icon,
        sort_order=sort_order,
    )


async def move_component(repos: ArchitectureRepos, node_id: str, layer_id: str) -> Node:
    """
    Re-home a component: drop its inbound CONTAINS edges, add
    `layer_id CONTAINS node_id` and update the node's layer field.
    Moving into the current layer is a no-op.
    """
    node = await get_component(repos, node_id)
    if node.is_layer():
        raise ValidationError(f"Node {node_id} is a layer and cannot be moved")
    target = await repos.nodes.find_by_id(layer_id)
    if target is None or not target.is_layer():
        raise ValidationError(f"Invalid layer: {layer_id} is not a valid layer")
    if node.layer == layer_id:
        return node

    for edge in await repos.edges.find_by_target(node_id):
        if edge.type == CONTAINS and edge.id is not None:
            await repos.edges.delete(edge.id)
    await repos.edges.save(Edge(source_id=layer_id, target_id=node_id, type=CONTAINS))
    moved = await repos.nodes.save(replace(node, layer=layer_id))
    logger.info(f"[architecture.service] Moved {node_id} from {node.layer} to {layer_id}")
    return moved


# ============== EDGES ==============

async def create_edge(
    repos: ArchitectureRepos,
    source_id: str,
    target_id: str,
    edge_type: str,
    label: Optional[str] = None,
) -> Edge:
    if edge_type not in EDGE_TYPES:
        raise ValidationError(f"Invalid edge type: {edge_type}")
    if edge_type == CONTAINS and source_id == target_id:
        raise ValidationError("A node cannot contain itself")
    for node_id in (source_id, target_id):
        if not await repos.nodes.exists(node_id):
            raise NodeNotFoundError(node_id)
    if await repos.edges.exists(source_id, target_id, edge_type):
        raise EdgeExistsError(source_id, target_id, edge_type)

    edge = await repos.edges.save(Edge(source_id=source_id, target_id=target_id, type=edge_type, label=label))
    logger.info(f"[architecture.service] Created edge {edge.id}: {source_id} -{edge_type}-> {target_id}")
    return edge


async def delete_edge(repos: ArchitectureRepos, edge_id: int) -> None:
    if not await repos.edges.delete(edge_id):
        raise EdgeNotFoundError(edge_id)
    logger.info(f"[architecture.service] Deleted edge {edge_id}")


async def component_edges(repos: ArchitectureRepos, node_id: str) -> Dict[str, List[Edge]]:
    """Every edge touching node_id, CONTAINS included, split by direction."""
    await get_component(repos, node_id)
    return {
        "inbound": await repos.edges.find_by_target(node_id),
        "outbound": await repos.edges.find_by_source(node_id),
    }


# ============== VERSIONS ==============

def validate_version_tag(version: str) -> None:
    if not is_known_version(version):
        raise ValidationError(f"Invalid version: {version}")


async def list_versions(repos: ArchitectureRepos, node_id: str) -> List[Dict[str, Any]]:
    await get_component(repos, node_id)
    return await enriched_versions(repos, node_id)


async def update_progress(
    repos: ArchitectureRepos,
    node_id: str,
    version: str,
    progress: int,
    status: Optional[str] = None,
) -> Version:
    """
    Record progress for (node, version), creating the row when absent.

    Status is derived from progress when not given: 0 planned, 100 complete,
    anything between in-progress.
    """
    validate_version_tag(version)
    if progress < 0 or progress > 100:
        raise ValidationError(f"Invalid progress: {progress} (must be 0-100)")
    if status is not None and status not in VERSION_STATUSES:
        raise ValidationError(f"Invalid status: {status}")
    await get_component(repos, node_id)

    resolved_status = status or status_for_progress(progress)
    updated = await repos.versions.update_progress(node_id, version, progress, resolved_status)
    if updated is None:
        updated = await repos.versions.save(Version(
            node_id=node_id, version=version, progress=progress, status=resolved_status,
        ))
    logger.info(f"[architecture.service] {node_id}@{version}: progress={progress} status={resolved_status}")
    return updated


# ============== FEATURES ==============

async def upload_feature(
    repos: ArchitectureRepos,
    node_id: str,
    version: str,
    filename: str,
    content: str,
) -> Feature:
    """Store (or replace) a Gherkin feature file and count its steps."""
    validate_version_tag(version)
    if not filename.endswith(".feature") or "/" in filename or "\\" in filename:
        raise ValidationError(f"Invalid feature filename: {filename}")
    if not Feature.has_valid_gherkin(content):
        raise ValidationError("Invalid Gherkin: content must contain a 'Feature:' line")
    await get_component(repos, node_id)

    feature = await repos.features.save(Feature(
        node_id=node_id,
        version=version,
        filename=filename,
        title=Feature.title_from_content(content, filename),
        content=content,
        step_count=Feature.count_steps(content),
    ))
    logger.info(
        f"[architecture.service] Stored feature {filename} for {node_id}@{version} "
        f"({feature.step_count} steps)"
    )
    return feature


async def step_totals(repos: ArchitectureRepos, node_id: str, version: str) -> StepSummary:
    validate_version_tag(version)
    await get_component(repos, node_id)
    return await repos.features.get_step_count_summary(node_id, version)


async def list_features(
    repos: ArchitectureRepos,
    node_id: str,
    version: str,
) -> Tuple[List[Feature], StepSummary]:
    """Feature files for (node, version) by filename, with their step totals."""
    validate_version_tag(version)
    await get_component(repos, node_id)
    features = await repos.features.find_by_node_and_version(node_id, version)
    return features, await repos.features.get_step_count_summary(node_id, version)


async def get_feature(repos: ArchitectureRepos, node_id: str, version: str, filename: str) -> Feature:
    validate_version_tag(version)
    await get_component(repos, node_id)
    feature = await repos.features.find_one(node_id, version, filename)
    if feature is None:
        raise FeatureNotFoundError(node_id, version, filename)
    return feature


async def delete_feature(repos: ArchitectureRepos, node_id: str, version: str, filename: str) -> None:
    validate_version_tag(version)
    await get_component(repos, node_id)
    if not await repos.features.delete_one(node_id, version, filename):
        raise FeatureNotFoundError(node_id, version, filename)
    logger.info(f"[architecture.service] Deleted feature {filename} for {node_id}@{version}")


# ============== ARCHITECTURE ==============

def _node_record(
    node: Node,
    versions: Dict[str, Dict[str, Any]],
    features: Dict[str, List[Dict[str, Any]]],
) -> Dict[str, Any]:
    record = asdict(node)
    record["versions"] = versions
    record["features"] = features
    return record


async def get_architecture(repos: ArchitectureRepos) -> Dict[str, Any]:
    """
    The whole graph in one read: every node with its version rows and
    feature files, layers with their children, relationship edges and totals.

    Layer children are the non-layer nodes whose `layer` field names the
    layer. CONTAINS edges are left out of `edges`; they are implied by the
    layer grouping.
    """
    nodes = await repos.nodes.find_all()
    edges = await repos.edges.find_all()
    versions = await repos.versions.find_all()
    features = await repos.features.find_all()

    versions_by_node: Dict[str, Dict[str, Dict[str, Any]]] = {}
    for row in versions:
        versions_by_node.setdefault(row.node_id, {})[row.version] = {
            "progress": row.progress,
            "status": row.status,
            "content": row.content,
            "updated_at": row.updated_at,
        }
    features_by_node: Dict[str, List[Feature]] = {}
    for feature in features:
        features_by_node.setdefault(feature.node_id, []).append(feature)

    records = [
        _node_record(n, versions_by_node.get(n.id, {}), group_features(features_by_node.get(n.id, [])))
        for n in nodes
    ]
    layers = []
    for node, record in zip(nodes, records):
        if not node.is_layer():
            continue
        layer_record = dict(record)
        layer_record["children"] = [
            r for n, r in zip(nodes, records) if n.layer == node.id and not n.is_layer()
        ]
        layers.append(layer_record)

    return {
        "generated_at": datetime.utcnow().isoformat(),
        "layers": layers,
        "nodes": records,
        "edges": [asdict(e) for e in edges if e.type != CONTAINS],
        "stats": {
            "total_nodes": len(nodes),
            "total_edges": len(edges),
            "total_versions": len(versions),
            "total_features": len(features),
        },
    }
