# FILE: app/architecture/models.py
"""
SQLAlchemy ORM models for architecture graph storage.

Tables:
    - nodes: layers, components, stores, apps ...
    - edges: typed directed relationships (unique per source/target/type)
    - node_versions: per-(node, version tag) progress
    - features: Gherkin feature files per (node, version, filename)

Edges, versions and features cascade on node delete.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, UniqueConstraint, Index
from app.db import Base


class ArchNode(Base):
    __tablename__ = "nodes"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    type = Column(String(20), nullable=False, index=True)
    layer = Column(String(64), nullable=True, index=True)  # Layer node id, not enforced
    color = Column(String(30), nullable=True)
    icon = Column(String(50), nullable=True)
    description = Column(Text, nullable=True)
    tags = Column(Text, nullable=True)  # JSON list
    sort_order = Column(Integer, default=0, nullable=False)
    current_version = Column(String(30), nullable=True)


class ArchEdge(Base):
    __tablename__ = "edges"

    id = Column(Integer, primary_key=True, autoincrement=True)
    source_id = Column(String(64), ForeignKey("nodes.id", ondelete="CASCADE"), nullable=False, index=True)
    target_id = Column(String(64), ForeignKey("nodes.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(30), nullable=False, index=True)
    label = Column(String(255), nullable=True)
    metadata_json = Column("metadata", Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("source_id", "target_id", "type", name="edges_source_target_type"),
    )


class NodeVersion(Base):
    __tablename__ = "node_versions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    node_id = Column(String(64), ForeignKey("nodes.id", ondelete="CASCADE"), nullable=False, index=True)
    version = Column(String(20), nullable=False)
    content = Column(Text, nullable=True)
    progress = Column(Integer, default=0, nullable=False)
    status = Column(String(20), default="planned", nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=True)

    __table_args__ = (
        UniqueConstraint("node_id", "version", name="node_versions_node_version"),
    )


class FeatureFile(Base):
    __tablename__ = "features"

    id = Column(Integer, primary_key=True, autoincrement=True)
    node_id = Column(String(64), ForeignKey("nodes.id", ondelete="CASCADE"), nullable=False)
    version = Column(String(20), nullable=False)
    filename = Column(String(255), nullable=False)
    title = Column(String(500), nullable=False)
    content = Column(Text, nullable=True)
    step_count = Column(Integer, default=0, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=True)

    __table_args__ = (
        UniqueConstraint("node_id", "version", "filename", name="features_node_version_filename"),
        Index("ix_features_node_version", "node_id", "version"),
    )
