# FILE: app/architecture/__init__.py
"""
Architecture graph storage and management.

- entities: plain dataclasses handed to the graph engine
- models: SQLAlchemy tables
- repositories: async repository layer over a DB session
- service: management operations (components, edges, progress, features)
- router: FastAPI endpoints
"""
