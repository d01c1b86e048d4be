# app/auth/config.py
"""
API key configuration.

Keys come from ROADMAP_API_KEYS (comma-separated). When no keys are set,
authentication is disabled and main.py logs a warning at startup.
"""

import os
import secrets
import logging
from typing import List

logger = logging.getLogger(__name__)


def load_api_keys() -> List[str]:
    """Read configured keys from the environment on every call."""
    raw = os.getenv("ROADMAP_API_KEYS", "")
    return [key.strip() for key in raw.split(",") if key.strip()]


def is_auth_configured() -> bool:
    return bool(load_api_keys())


def validate_api_key(token: str) -> bool:
    """Constant-time comparison against every configured key."""
    if not token:
        return False
    matched = False
    for key in load_api_keys():
        if secrets.compare_digest(token.encode(), key.encode()):
            matched = True
    return matched
