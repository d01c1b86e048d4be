# app/auth/__init__.py
"""
Authentication module for the roadmap service.
Bearer API keys configured through ROADMAP_API_KEYS.
"""

from .middleware import require_auth, optional_auth, AuthResult
from .config import is_auth_configured, load_api_keys, validate_api_key

__all__ = [
    # Middleware
    "require_auth",
    "optional_auth",
    "AuthResult",
    # Config functions
    "is_auth_configured",
    "load_api_keys",
    "validate_api_key",
]
