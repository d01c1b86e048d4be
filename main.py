# FILE: main.py
"""
Roadmap Backend - FastAPI Application
Version: 0.1.0

Architecture knowledge graph for the project roadmap: layers, components
and typed relationships, with per-version progress and Gherkin step
coverage.

Features:
- Dependency trees, dependents and neighbourhoods per component
- Implementation order with dependency cycle reporting
- Status buckets, next-implementable components and layer overviews
- Shortest relationship path between two components
- Component, edge, progress and feature file management
"""
import os
import logging

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Load .env FIRST before any other imports that might need env vars
load_dotenv()

from app.db import init_db
from app.auth import AuthResult, is_auth_configured, optional_auth
from app.architecture.router import router as architecture_router

logging.basicConfig(
    level=os.getenv("ROADMAP_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Roadmap Architecture Graph",
    version="0.1.0",
    description="Architecture graph queries and roadmap progress tracking",
)

# ====== CORS ======

_DEFAULT_ORIGINS = "http://localhost:5173,http://127.0.0.1:5173"

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        origin.strip()
        for origin in os.getenv("ROADMAP_CORS_ORIGINS", _DEFAULT_ORIGINS).split(",")
        if origin.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ====== STARTUP ======

@app.on_event("startup")
def on_startup():
    os.makedirs("data", exist_ok=True)
    init_db()

    if is_auth_configured():
        logger.info("[startup] API key authentication: [OK] configured")
    else:
        logger.warning("[startup] API key authentication: [X] DISABLED - set ROADMAP_API_KEYS to enable")


# ====== ROUTERS ======

app.include_router(architecture_router)


# ====== PUBLIC ENDPOINTS ======

@app.get("/ping")
def ping(auth: AuthResult = Depends(optional_auth)):
    """Health check (public). Reports whether the caller's key was accepted."""
    return {
        "status": "ok",
        "auth_configured": is_auth_configured(),
        "authenticated": auth.authenticated,
    }
