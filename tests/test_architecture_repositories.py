# FILE: tests/test_architecture_repositories.py
"""
Tests for app/architecture/repositories.py
SQLAlchemy-backed repositories against in-memory SQLite.
"""

import sys
from pathlib import Path

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest
from sqlalchemy.exc import IntegrityError

from app.architecture.entities import Edge, Feature, Node, Version
from app.graph import dependency_tree, implementation_order


async def _seed(repos):
    await repos.nodes.save(Node(id="core", name="Core", type="layer", sort_order=0))
    await repos.nodes.save(Node(id="web", name="Web", type="app", sort_order=2))
    await repos.nodes.save(Node(id="api", name="API", type="component", layer="core", tags=["http"], sort_order=1))
    await repos.nodes.save(Node(id="db", name="DB", type="store", sort_order=1))
    await repos.edges.save(Edge(source_id="core", target_id="api", type="CONTAINS"))
    await repos.edges.save(Edge(source_id="api", target_id="db", type="DEPENDS_ON"))
    await repos.edges.save(Edge(source_id="web", target_id="api", type="DEPENDS_ON"))


class TestNodeRepository:

    @pytest.mark.asyncio
    async def test_round_trip_keeps_tags(self, sql_repos):
        await _seed(sql_repos)
        node = await sql_repos.nodes.find_by_id("api")
        assert node.tags == ["http"]
        assert node.layer == "core"

    @pytest.mark.asyncio
    async def test_find_all_ordered_by_sort_order_then_id(self, sql_repos):
        await _seed(sql_repos)
        assert [n.id for n in await sql_repos.nodes.find_all()] == ["core", "api", "db", "web"]

    @pytest.mark.asyncio
    async def test_find_by_type_and_layer(self, sql_repos):
        await _seed(sql_repos)
        assert [n.id for n in await sql_repos.nodes.find_by_type("layer")] == ["core"]
        assert [n.id for n in await sql_repos.nodes.find_by_layer("core")] == ["api"]

    @pytest.mark.asyncio
    async def test_save_updates_existing(self, sql_repos):
        await _seed(sql_repos)
        await sql_repos.nodes.save(Node(id="db", name="Database", type="store"))
        assert (await sql_repos.nodes.find_by_id("db")).name == "Database"

    @pytest.mark.asyncio
    async def test_missing(self, sql_repos):
        assert await sql_repos.nodes.find_by_id("ghost") is None
        assert not await sql_repos.nodes.exists("ghost")
        assert not await sql_repos.nodes.delete("ghost")


class TestEdgeRepository:

    @pytest.mark.asyncio
    async def test_relationships_exclude_contains(self, sql_repos):
        await _seed(sql_repos)
        assert [e.type for e in await sql_repos.edges.find_relationships()] == ["DEPENDS_ON", "DEPENDS_ON"]
        assert len(await sql_repos.edges.find_all()) == 3

    @pytest.mark.asyncio
    async def test_source_and_target_lookup(self, sql_repos):
        await _seed(sql_repos)
        assert [e.target_id for e in await sql_repos.edges.find_by_source("api")] == ["db"]
        assert [e.source_id for e in await sql_repos.edges.find_by_target("api")] == ["core", "web"]

    @pytest.mark.asyncio
    async def test_exists_is_per_type(self, sql_repos):
        await _seed(sql_repos)
        assert await sql_repos.edges.exists("api", "db", "DEPENDS_ON")
        assert not await sql_repos.edges.exists("api", "db", "READS_FROM")

    @pytest.mark.asyncio
    async def test_unique_constraint(self, sql_repos):
        await _seed(sql_repos)
        with pytest.raises(IntegrityError):
            await sql_repos.edges.save(Edge(source_id="api", target_id="db", type="DEPENDS_ON"))

    @pytest.mark.asyncio
    async def test_delete_touching(self, sql_repos):
        await _seed(sql_repos)
        assert await sql_repos.edges.delete_touching("api") == 3
        assert await sql_repos.edges.find_all() == []

    @pytest.mark.asyncio
    async def test_delete_by_id(self, sql_repos):
        await _seed(sql_repos)
        edge = (await sql_repos.edges.find_by_type("CONTAINS"))[0]
        assert await sql_repos.edges.delete(edge.id)
        assert await sql_repos.edges.find_by_id(edge.id) is None


class TestVersionRepository:

    @pytest.mark.asyncio
    async def test_save_is_upsert(self, sql_repos):
        await _seed(sql_repos)
        await sql_repos.versions.save(Version(node_id="api", version="mvp", progress=10, status="in-progress"))
        await sql_repos.versions.save(Version(node_id="api", version="mvp", progress=60, status="in-progress"))
        rows = await sql_repos.versions.find_by_node("api")
        assert len(rows) == 1
        assert rows[0].progress == 60
        assert rows[0].updated_at is not None

    @pytest.mark.asyncio
    async def test_update_progress_missing_row(self, sql_repos):
        await _seed(sql_repos)
        assert await sql_repos.versions.update_progress("api", "v1", 50, "in-progress") is None

    @pytest.mark.asyncio
    async def test_update_progress(self, sql_repos):
        await _seed(sql_repos)
        await sql_repos.versions.save(Version(node_id="api", version="v1"))
        row = await sql_repos.versions.update_progress("api", "v1", 100, "complete")
        assert row.is_complete()
        found = await sql_repos.versions.find_by_node_and_version("api", "v1")
        assert found.progress == 100


class TestFeatureRepository:

    @pytest.mark.asyncio
    async def test_step_count_summary(self, sql_repos):
        await _seed(sql_repos)
        for filename, steps in (("a.feature", 3), ("b.feature", 5)):
            await sql_repos.features.save(Feature(
                node_id="api", version="mvp", filename=filename, title=filename, step_count=steps,
            ))
        summary = await sql_repos.features.get_step_count_summary("api", "mvp")
        assert (summary.total_steps, summary.feature_count) == (8, 2)

    @pytest.mark.asyncio
    async def test_step_count_summary_empty(self, sql_repos):
        await _seed(sql_repos)
        summary = await sql_repos.features.get_step_count_summary("api", "v2")
        assert (summary.total_steps, summary.feature_count) == (0, 0)

    @pytest.mark.asyncio
    async def test_save_replaces_same_key(self, sql_repos):
        await _seed(sql_repos)
        await sql_repos.features.save(Feature(node_id="db", version="mvp", filename="x.feature", title="X", step_count=1))
        await sql_repos.features.save(Feature(node_id="db", version="mvp", filename="x.feature", title="X2", step_count=7))
        rows = await sql_repos.features.find_by_node_and_version("db", "mvp")
        assert [(f.title, f.step_count) for f in rows] == [("X2", 7)]

    @pytest.mark.asyncio
    async def test_find_and_delete_one(self, sql_repos):
        await _seed(sql_repos)
        for version in ("mvp", "v1"):
            await sql_repos.features.save(Feature(
                node_id="api", version=version, filename="x.feature", title="X", content="Feature: X", step_count=0,
            ))
        found = await sql_repos.features.find_one("api", "mvp", "x.feature")
        assert found.content == "Feature: X"
        assert await sql_repos.features.find_one("api", "v2", "x.feature") is None

        assert await sql_repos.features.delete_one("api", "mvp", "x.feature")
        assert not await sql_repos.features.delete_one("api", "mvp", "x.feature")
        assert [f.version for f in await sql_repos.features.find_by_node("api")] == ["v1"]


class TestEngineOverSql:
    """Graph queries against the real repositories."""

    @pytest.mark.asyncio
    async def test_implementation_order(self, sql_repos):
        await _seed(sql_repos)
        result = await implementation_order(sql_repos)
        assert result.order == ["db", "api", "web"]

    @pytest.mark.asyncio
    async def test_dependency_tree(self, sql_repos):
        await _seed(sql_repos)
        tree = await dependency_tree(sql_repos, "web", 2)
        assert [t.to_dict() for t in tree] == [{
            "id": "api",
            "name": "API",
            "type": "component",
            "dependencies": [{"id": "db", "name": "DB", "type": "store"}],
        }]
