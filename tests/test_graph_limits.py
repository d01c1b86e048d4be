# FILE: tests/test_graph_limits.py
"""
Tests for config/graph_limits.py
Query parameter clamping and version tag ordering.
"""

import sys
from pathlib import Path

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest

from config.graph_limits import clamp_param, is_known_version, sorted_versions


class TestClampParam:

    @pytest.mark.parametrize("raw,expected", [
        (None, 1),
        ("", 1),
        ("abc", 1),
        ("0", 1),
        ("-3", 1),
        ("3", 3),
        ("10", 10),
        ("99", 10),
    ])
    def test_depth_bounds(self, raw, expected):
        assert clamp_param(raw, 1, 10) == expected

    def test_hops_cap(self):
        assert clamp_param("7", 1, 5) == 5


class TestVersions:

    def test_known(self):
        assert is_known_version("mvp")
        assert not is_known_version("v3")

    def test_canonical_order(self):
        assert sorted_versions(["v2", "zeta", "mvp", "overview", "v1"]) == ["overview", "mvp", "v1", "v2", "zeta"]
