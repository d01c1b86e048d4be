# FILE: config/__init__.py
"""Configuration package for the architecture roadmap service.

Contains:
- graph_limits.py: traversal bounds, version tags and query param clamping
"""

from config.graph_limits import (
    DEFAULT_DEPTH,
    DEFAULT_HOPS,
    MAX_DEPTH,
    MAX_HOPS,
    VERSION_TAGS,
    DEFAULT_VERSION,
    TRACKED_VERSIONS,
    clamp_param,
    is_known_version,
    sorted_versions,
)

__all__ = [
    "DEFAULT_DEPTH",
    "DEFAULT_HOPS",
    "MAX_DEPTH",
    "MAX_HOPS",
    "VERSION_TAGS",
    "DEFAULT_VERSION",
    "TRACKED_VERSIONS",
    "clamp_param",
    "is_known_version",
    "sorted_versions",
]
