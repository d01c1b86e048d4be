# FILE: tests/conftest.py
"""
Pytest configuration for the roadmap test suite.

Configures:
- pytest-asyncio for async test support
- an in-memory SQLite session shared across threads (StaticPool)
"""
import sys
from pathlib import Path

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

pytest_plugins = ["pytest_asyncio"]


@pytest.fixture
def db_engine():
    from app.db import Base, enable_sqlite_foreign_keys
    from app.architecture import models  # noqa: F401

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sql_repos(db_session):
    from app.architecture.repositories import build_repos
    return build_repos(db_session)
