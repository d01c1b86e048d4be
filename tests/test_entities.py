# FILE: tests/test_entities.py
"""
Tests for app/architecture/entities.py
Entity helpers and Gherkin parsing.
"""

import sys
from pathlib import Path

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest

from app.architecture.entities import Edge, Feature, Node, Version, status_for_progress


class TestNodeAndEdge:

    def test_layer_detection(self):
        assert Node(id="core", name="Core", type="layer").is_layer()
        assert not Node(id="api", name="API", type="component").is_layer()

    def test_edge_kinds(self):
        assert Edge(source_id="a", target_id="b", type="DEPENDS_ON").is_dependency()
        assert not Edge(source_id="a", target_id="b", type="READS_FROM").is_dependency()


class TestVersion:

    @pytest.mark.parametrize("progress,status,expected", [
        (100, "in-progress", True),
        (40, "complete", True),
        (99, "in-progress", False),
        (0, "planned", False),
    ])
    def test_is_complete(self, progress, status, expected):
        assert Version(node_id="a", version="mvp", progress=progress, status=status).is_complete() is expected

    @pytest.mark.parametrize("progress,expected", [(0, "planned"), (1, "in-progress"), (99, "in-progress"), (100, "complete")])
    def test_status_for_progress(self, progress, expected):
        assert status_for_progress(progress) == expected


class TestGherkin:

    CONTENT = """Feature: Checkout
  Background:
    Given a cart

  Scenario: Pay
    When I pay
    Then the order is placed
    And I get a receipt
    But no duplicate charge
  # Given in a comment does not count
"""

    def test_count_steps(self):
        assert Feature.count_steps(self.CONTENT) == 5

    def test_count_steps_empty(self):
        assert Feature.count_steps("") == 0

    def test_title(self):
        assert Feature.title_from_content(self.CONTENT, "checkout.feature") == "Checkout"

    def test_title_falls_back_to_filename(self):
        assert Feature.title_from_content("Scenario: x", "checkout.feature") == "checkout"

    def test_valid_gherkin(self):
        assert Feature.has_valid_gherkin(self.CONTENT)
        assert not Feature.has_valid_gherkin("Feature:   \n")
        assert not Feature.has_valid_gherkin("Scenario: x")
