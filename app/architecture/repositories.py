# FILE: app/architecture/repositories.py
"""
Async repository facades over the architecture tables.

Every read returns a fully materialised list of domain dataclasses
(app.architecture.entities), never ORM rows or lazy cursors. The blocking
SQLAlchemy work runs in a worker thread via asyncio.to_thread; callers must
await one repository call at a time per session.
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime
from dataclasses import dataclass
from typing import Callable, List, Optional, TypeVar

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.architecture.entities import (
    CONTAINS,
    Edge,
    Feature,
    Node,
    StepSummary,
    Version,
)
from app.architecture.models import ArchEdge, ArchNode, FeatureFile, NodeVersion

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# Row -> entity mapping
# =============================================================================

def _parse_tags(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    try:
        tags = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"[architecture.repositories] Invalid tags JSON: {raw!r}")
        return []
    return [str(t) for t in tags] if isinstance(tags, list) else []


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def node_from_row(row: ArchNode) -> Node:
    return Node(
        id=row.id,
        name=row.name,
        type=row.type,
        layer=row.layer,
        tags=_parse_tags(row.tags),
        description=row.description,
        color=row.color,
        icon=row.icon,
        sort_order=row.sort_order or 0,
        current_version=row.current_version,
    )


def edge_from_row(row: ArchEdge) -> Edge:
    return Edge(
        id=row.id,
        source_id=row.source_id,
        target_id=row.target_id,
        type=row.type,
        label=row.label,
        metadata=row.metadata_json,
    )


def version_from_row(row: NodeVersion) -> Version:
    return Version(
        id=row.id,
        node_id=row.node_id,
        version=row.version,
        progress=row.progress or 0,
        status=row.status or "planned",
        content=row.content,
        updated_at=_iso(row.updated_at),
    )


def feature_from_row(row: FeatureFile) -> Feature:
    return Feature(
        id=row.id,
        node_id=row.node_id,
        version=row.version,
        filename=row.filename,
        title=row.title,
        content=row.content,
        step_count=row.step_count or 0,
        updated_at=_iso(row.updated_at),
    )


class _SessionRepository:
    def __init__(self, db: Session):
        self.db = db

    async def _run(self, fn: Callable[..., T], *args) -> T:
        return await asyncio.to_thread(fn, *args)


# =============================================================================
# NODES
# =============================================================================

class NodeRepository(_SessionRepository):

    def _ordered(self):
        return self.db.query(ArchNode).order_by(ArchNode.sort_order, ArchNode.id)

    def _find_all(self) -> List[Node]:
        return [node_from_row(r) for r in self._ordered().all()]

    def _find_by_id(self, node_id: str) -> Optional[Node]:
        row = self.db.get(ArchNode, node_id)
        return node_from_row(row) if row else None

    def _find_by_type(self, node_type: str) -> List[Node]:
        return [node_from_row(r) for r in self._ordered().filter(ArchNode.type == node_type).all()]

    def _find_by_layer(self, layer_id: str) -> List[Node]:
        return [node_from_row(r) for r in self._ordered().filter(ArchNode.layer == layer_id).all()]

    def _save(self, node: Node) -> Node:
        row = self.db.get(ArchNode, node.id) or ArchNode(id=node.id)
        row.name = node.name
        row.type = node.type
        row.layer = node.layer
        row.color = node.color
        row.icon = node.icon
        row.description = node.description
        row.tags = json.dumps(list(node.tags))
        row.sort_order = node.sort_order
        row.current_version = node.current_version
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return node_from_row(row)

    def _delete(self, node_id: str) -> bool:
        row = self.db.get(ArchNode, node_id)
        if not row:
            return False
        self.db.delete(row)
        self.db.commit()
        return True

    async def find_all(self) -> List[Node]:
        return await self._run(self._find_all)

    async def find_by_id(self, node_id: str) -> Optional[Node]:
        return await self._run(self._find_by_id, node_id)

    async def find_by_type(self, node_type: str) -> List[Node]:
        return await self._run(self._find_by_type, node_type)

    async def find_by_layer(self, layer_id: str) -> List[Node]:
        return await self._run(self._find_by_layer, layer_id)

    async def exists(self, node_id: str) -> bool:
        return await self.find_by_id(node_id) is not None

    async def save(self, node: Node) -> Node:
        return await self._run(self._save, node)

    async def delete(self, node_id: str) -> bool:
        return await self._run(self._delete, node_id)


# =============================================================================
# EDGES
# =============================================================================

class EdgeRepository(_SessionRepository):

    def _query(self, *criteria) -> List[Edge]:
        rows = self.db.query(ArchEdge).filter(*criteria).order_by(ArchEdge.id).all()
        return [edge_from_row(r) for r in rows]

    def _find_by_id(self, edge_id: int) -> Optional[Edge]:
        row = self.db.get(ArchEdge, edge_id)
        return edge_from_row(row) if row else None

    def _exists(self, source_id: str, target_id: str, edge_type: str) -> bool:
        return self.db.query(ArchEdge.id).filter(
            ArchEdge.source_id == source_id,
            ArchEdge.target_id == target_id,
            ArchEdge.type == edge_type,
        ).first() is not None

    def _save(self, edge: Edge) -> Edge:
        row = ArchEdge(
            source_id=edge.source_id,
            target_id=edge.target_id,
            type=edge.type,
            label=edge.label,
            metadata_json=edge.metadata,
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return edge_from_row(row)

    def _delete(self, edge_id: int) -> bool:
        row = self.db.get(ArchEdge, edge_id)
        if not row:
            return False
        self.db.delete(row)
        self.db.commit()
        return True

    def _delete_touching(self, node_id: str) -> int:
        count = self.db.query(ArchEdge).filter(
            (ArchEdge.source_id == node_id) | (ArchEdge.target_id == node_id)
        ).delete(synchronize_session=False)
        self.db.commit()
        return count

    async def find_all(self) -> List[Edge]:
        return await self._run(self._query)

    async def find_by_id(self, edge_id: int) -> Optional[Edge]:
        return await self._run(self._find_by_id, edge_id)

    async def find_by_source(self, source_id: str) -> List[Edge]:
        return await self._run(self._query, ArchEdge.source_id == source_id)

    async def find_by_target(self, target_id: str) -> List[Edge]:
        return await self._run(self._query, ArchEdge.target_id == target_id)

    async def find_by_type(self, edge_type: str) -> List[Edge]:
        return await self._run(self._query, ArchEdge.type == edge_type)

    async def find_relationships(self) -> List[Edge]:
        """All edges except CONTAINS."""
        return await self._run(self._query, ArchEdge.type != CONTAINS)

    async def exists(self, source_id: str, target_id: str, edge_type: str) -> bool:
        return await self._run(self._exists, source_id, target_id, edge_type)

    async def save(self, edge: Edge) -> Edge:
        return await self._run(self._save, edge)

    async def delete(self, edge_id: int) -> bool:
        return await self._run(self._delete, edge_id)

    async def delete_touching(self, node_id: str) -> int:
        return await self._run(self._delete_touching, node_id)


# =============================================================================
# VERSIONS
# =============================================================================

class VersionRepository(_SessionRepository):

    def _find_all(self) -> List[Version]:
        rows = self.db.query(NodeVersion).order_by(NodeVersion.node_id, NodeVersion.version).all()
        return [version_from_row(r) for r in rows]

    def _find_by_node(self, node_id: str) -> List[Version]:
        rows = (
            self.db.query(NodeVersion)
            .filter(NodeVersion.node_id == node_id)
            .order_by(NodeVersion.version)
            .all()
        )
        return [version_from_row(r) for r in rows]

    def _get_row(self, node_id: str, version: str) -> Optional[NodeVersion]:
        return self.db.query(NodeVersion).filter(
            NodeVersion.node_id == node_id,
            NodeVersion.version == version,
        ).first()

    def _find_by_node_and_version(self, node_id: str, version: str) -> Optional[Version]:
        row = self._get_row(node_id, version)
        return version_from_row(row) if row else None

    def _save(self, version: Version) -> Version:
        row = self._get_row(version.node_id, version.version) or NodeVersion(
            node_id=version.node_id, version=version.version
        )
        row.content = version.content
        row.progress = version.progress
        row.status = version.status
        row.updated_at = datetime.utcnow()
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return version_from_row(row)

    def _update_progress(self, node_id: str, version: str, progress: int, status: str) -> Optional[Version]:
        row = self._get_row(node_id, version)
        if not row:
            return None
        row.progress = progress
        row.status = status
        row.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(row)
        return version_from_row(row)

    def _delete_by_node(self, node_id: str) -> int:
        count = self.db.query(NodeVersion).filter(NodeVersion.node_id == node_id).delete(
            synchronize_session=False
        )
        self.db.commit()
        return count

    async def find_all(self) -> List[Version]:
        return await self._run(self._find_all)

    async def find_by_node(self, node_id: str) -> List[Version]:
        return await self._run(self._find_by_node, node_id)

    async def find_by_node_and_version(self, node_id: str, version: str) -> Optional[Version]:
        return await self._run(self._find_by_node_and_version, node_id, version)

    async def save(self, version: Version) -> Version:
        return await self._run(self._save, version)

    async def update_progress(self, node_id: str, version: str, progress: int, status: str) -> Optional[Version]:
        return await self._run(self._update_progress, node_id, version, progress, status)

    async def delete_by_node(self, node_id: str) -> int:
        return await self._run(self._delete_by_node, node_id)


# =============================================================================
# FEATURES
# =============================================================================

class FeatureRepository(_SessionRepository):

    def _find_all(self) -> List[Feature]:
        rows = self.db.query(FeatureFile).order_by(
            FeatureFile.node_id, FeatureFile.version, FeatureFile.filename
        ).all()
        return [feature_from_row(r) for r in rows]

    def _find_by_node(self, node_id: str) -> List[Feature]:
        rows = (
            self.db.query(FeatureFile)
            .filter(FeatureFile.node_id == node_id)
            .order_by(FeatureFile.version, FeatureFile.filename)
            .all()
        )
        return [feature_from_row(r) for r in rows]

    def _find_by_node_and_version(self, node_id: str, version: str) -> List[Feature]:
        rows = (
            self.db.query(FeatureFile)
            .filter(FeatureFile.node_id == node_id, FeatureFile.version == version)
            .order_by(FeatureFile.filename)
            .all()
        )
        return [feature_from_row(r) for r in rows]

    def _get_row(self, node_id: str, version: str, filename: str) -> Optional[FeatureFile]:
        return self.db.query(FeatureFile).filter(
            FeatureFile.node_id == node_id,
            FeatureFile.version == version,
            FeatureFile.filename == filename,
        ).first()

    def _find_one(self, node_id: str, version: str, filename: str) -> Optional[Feature]:
        row = self._get_row(node_id, version, filename)
        return feature_from_row(row) if row else None

    def _save(self, feature: Feature) -> Feature:
        row = self._get_row(feature.node_id, feature.version, feature.filename) or FeatureFile(
            node_id=feature.node_id, version=feature.version, filename=feature.filename
        )
        row.title = feature.title
        row.content = feature.content
        row.step_count = feature.step_count
        row.updated_at = datetime.utcnow()
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return feature_from_row(row)

    def _delete_one(self, node_id: str, version: str, filename: str) -> bool:
        row = self._get_row(node_id, version, filename)
        if not row:
            return False
        self.db.delete(row)
        self.db.commit()
        return True

    def _delete_by_node(self, node_id: str) -> int:
        count = self.db.query(FeatureFile).filter(FeatureFile.node_id == node_id).delete(
            synchronize_session=False
        )
        self.db.commit()
        return count

    def _step_count_summary(self, node_id: str, version: str) -> StepSummary:
        total, count = self.db.query(
            func.coalesce(func.sum(FeatureFile.step_count), 0),
            func.count(FeatureFile.id),
        ).filter(
            FeatureFile.node_id == node_id,
            FeatureFile.version == version,
        ).one()
        return StepSummary(total_steps=int(total or 0), feature_count=int(count or 0))

    async def find_all(self) -> List[Feature]:
        return await self._run(self._find_all)

    async def find_by_node(self, node_id: str) -> List[Feature]:
        return await self._run(self._find_by_node, node_id)

    async def find_by_node_and_version(self, node_id: str, version: str) -> List[Feature]:
        return await self._run(self._find_by_node_and_version, node_id, version)

    async def find_one(self, node_id: str, version: str, filename: str) -> Optional[Feature]:
        return await self._run(self._find_one, node_id, version, filename)

    async def save(self, feature: Feature) -> Feature:
        return await self._run(self._save, feature)

    async def delete_one(self, node_id: str, version: str, filename: str) -> bool:
        return await self._run(self._delete_one, node_id, version, filename)

    async def delete_by_node(self, node_id: str) -> int:
        return await self._run(self._delete_by_node, node_id)

    async def get_step_count_summary(self, node_id: str, version: str) -> StepSummary:
        return await self._run(self._step_count_summary, node_id, version)


# =============================================================================
# BUNDLE
# =============================================================================

@dataclass
class ArchitectureRepos:
    """The four repositories every graph query and management call needs."""
    nodes: NodeRepository
    edges: EdgeRepository
    versions: VersionRepository
    features: FeatureRepository


def build_repos(db: Session) -> ArchitectureRepos:
    return ArchitectureRepos(
        nodes=NodeRepository(db),
        edges=EdgeRepository(db),
        versions=VersionRepository(db),
        features=FeatureRepository(db),
    )
