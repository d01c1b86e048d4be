# FILE: tests/test_graph_ordering.py
"""
Tests for app/graph/ordering.py
Implementation order (topological sort with cycle witness) and next
implementable components.
"""

import sys
from pathlib import Path

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest

from app.graph import implementation_order, next_implementable, OrderResult
from app.graph.ordering import dependency_map, topological_order
from tests.fakes import component, depends, feature, layer, make_repos, progress


class TestTopologicalOrder:
    """Pure DFS over a dependency map."""

    def test_chain(self):
        result = topological_order(["a", "b", "c"], {"a": ["b"], "b": ["c"], "c": []})
        assert result.order == ["c", "b", "a"]
        assert not result.has_cycle

    def test_self_loop_is_cycle(self):
        result = topological_order(["a"], {"a": ["a"]})
        assert result.cycle == ["a", "a"]

    def test_cycle_witness_is_closed_path(self):
        result = topological_order(
            ["x", "a", "b", "c"],
            {"x": ["a"], "a": ["b"], "b": ["c"], "c": ["a"]},
        )
        assert result.cycle == ["a", "b", "c", "a"]

    def test_dependency_map_drops_unknown_endpoints(self):
        from app.architecture.entities import Edge
        edges = [
            Edge(source_id="a", target_id="b", type="DEPENDS_ON"),
            Edge(source_id="a", target_id="core", type="DEPENDS_ON"),
            Edge(source_id="a", target_id="b", type="READS_FROM"),
        ]
        assert dependency_map(["a", "b"], edges) == {"a": ["b"], "b": []}


class TestOrderResult:

    def test_requires_exactly_one(self):
        with pytest.raises(ValueError):
            OrderResult()
        with pytest.raises(ValueError):
            OrderResult(order=[], cycle=["a", "a"])

    def test_to_dict(self):
        assert OrderResult(order=["a"]).to_dict() == {"order": ["a"]}
        assert OrderResult(cycle=["a", "a"]).to_dict() == {"cycle": ["a", "a"]}


class TestImplementationOrder:
    """Repository-backed build order."""

    @pytest.mark.asyncio
    async def test_dependencies_come_first(self):
        repos = make_repos(
            nodes=[component("a"), component("b"), component("c")],
            edges=[depends("a", "b"), depends("b", "c")],
        )
        result = await implementation_order(repos)
        assert result.order == ["c", "b", "a"]

    @pytest.mark.asyncio
    async def test_every_edge_respected(self):
        edges = [depends("web", "api"), depends("api", "db"), depends("worker", "db"), depends("web", "auth")]
        repos = make_repos(
            nodes=[component(n) for n in ("web", "api", "db", "worker", "auth", "lonely")],
            edges=edges,
        )
        result = await implementation_order(repos)
        assert sorted(result.order) == ["api", "auth", "db", "lonely", "web", "worker"]
        position = {node_id: i for i, node_id in enumerate(result.order)}
        for edge in edges:
            assert position[edge.target_id] < position[edge.source_id]

    @pytest.mark.asyncio
    async def test_cycle_reported(self):
        repos = make_repos(
            nodes=[component("a"), component("b"), component("c")],
            edges=[depends("a", "b"), depends("b", "c"), depends("c", "a")],
        )
        result = await implementation_order(repos)
        assert result.has_cycle
        assert result.order is None
        assert {"a", "b", "c"} <= set(result.cycle)
        assert result.cycle[0] == result.cycle[-1]

    @pytest.mark.asyncio
    async def test_layers_excluded(self):
        repos = make_repos(
            nodes=[layer("core"), component("a", layer="core")],
            edges=[depends("a", "core")],
        )
        result = await implementation_order(repos)
        assert result.order == ["a"]

    @pytest.mark.asyncio
    async def test_empty_graph(self):
        result = await implementation_order(make_repos())
        assert result.order == []


class TestNextImplementable:
    """Incomplete components whose dependencies are all complete."""

    @pytest.mark.asyncio
    async def test_blocked_until_dependency_complete(self):
        repos = make_repos(
            nodes=[component("a"), component("b")],
            edges=[depends("a", "b")],
        )
        ready = await next_implementable(repos, "mvp")
        assert [c.id for c in ready] == ["b"]

    @pytest.mark.asyncio
    async def test_unblocked_when_dependency_complete(self):
        repos = make_repos(
            nodes=[component("a"), component("b")],
            edges=[depends("a", "b")],
            versions=[progress("b", "mvp", 100), progress("a", "mvp", 30)],
            features=[feature("a", "mvp", "a.feature", 4)],
        )
        ready = await next_implementable(repos, "mvp")
        assert [c.to_dict() for c in ready] == [
            {"id": "a", "name": "A", "type": "component", "progress": 30, "total_steps": 4},
        ]

    @pytest.mark.asyncio
    async def test_complete_status_counts_without_full_progress(self):
        repos = make_repos(
            nodes=[component("a"), component("b")],
            edges=[depends("a", "b")],
            versions=[progress("b", "mvp", 80, status="complete")],
        )
        ready = await next_implementable(repos, "mvp")
        assert [c.id for c in ready] == ["a"]

    @pytest.mark.asyncio
    async def test_versions_are_independent(self):
        repos = make_repos(
            nodes=[component("a"), component("b")],
            edges=[depends("a", "b")],
            versions=[progress("b", "mvp", 100)],
        )
        ready = await next_implementable(repos, "v1")
        assert [c.id for c in ready] == ["b"]

    @pytest.mark.asyncio
    async def test_layers_never_listed(self):
        repos = make_repos(nodes=[layer("core"), component("a", layer="core")])
        ready = await next_implementable(repos, "mvp")
        assert [c.id for c in ready] == ["a"]
