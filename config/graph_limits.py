"""Graph query limits - Single source of truth.

Route handlers clamp caller-supplied `depth` and `hops` to these bounds so
that traversal cost stays proportional to project size, not to user input.

Environment overrides:
  - ROADMAP_MAX_DEPTH: dependency tree depth cap (default 10)
  - ROADMAP_MAX_HOPS: neighbourhood hop cap (default 5)
  - ROADMAP_TRACKED_VERSIONS: comma-separated tags rolled up by the
    layer overview (default "mvp,v1,v2")
"""

from __future__ import annotations

import os
from typing import List, Optional, Tuple

# =============================================================================
# Traversal bounds
# =============================================================================

DEFAULT_DEPTH = 1
DEFAULT_HOPS = 1


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= 1 else default


MAX_DEPTH: int = _env_int("ROADMAP_MAX_DEPTH", 10)
MAX_HOPS: int = _env_int("ROADMAP_MAX_HOPS", 5)

# =============================================================================
# Version tags
# =============================================================================

# Ordered project phases. "overview" carries documentation only and is never
# counted towards completion.
VERSION_TAGS: Tuple[str, ...] = ("overview", "mvp", "v1", "v2")

DEFAULT_VERSION = "mvp"


def _tracked_versions() -> Tuple[str, ...]:
    raw = os.getenv("ROADMAP_TRACKED_VERSIONS", "").strip()
    if not raw:
        return ("mvp", "v1", "v2")
    tags = [t.strip() for t in raw.split(",") if t.strip()]
    return tuple(t for t in tags if t in VERSION_TAGS and t != "overview") or ("mvp", "v1", "v2")


TRACKED_VERSIONS: Tuple[str, ...] = _tracked_versions()


def clamp_param(raw: Optional[str], default: int, maximum: int) -> int:
    """Parse a positive integer query parameter.

    Missing, non-numeric and < 1 values fall back to `default`; larger values
    are capped at `maximum`.
    """
    if not raw:
        return default
    try:
        parsed = int(raw)
    except ValueError:
        return default
    if parsed < 1:
        return default
    return min(parsed, maximum)


def is_known_version(tag: str) -> bool:
    return tag in VERSION_TAGS


def version_sort_key(tag: str) -> Tuple[int, str]:
    """Canonical tags first in phase order, unknown tags after, alphabetically."""
    if tag in VERSION_TAGS:
        return (VERSION_TAGS.index(tag), "")
    return (len(VERSION_TAGS), tag)


def sorted_versions(tags: List[str]) -> List[str]:
    return sorted(tags, key=version_sort_key)
