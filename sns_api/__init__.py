"""
SNS API Server — Application Package Initializer
=================================================

What: Marks the `sns_api` directory as a Python package.
Who:  Imported by uvicorn (`sns_api.main:app`), Alembic, and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │      Services (Business Logic)      │  ← Validation, error mapping
    ├─────────────────────────────────────┤
    │     Store (Persistence Client)      │  ← Queries, store conditions
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never touch the session directly; services never build HTTP
    responses; the store never decides status codes.
"""

__version__ = "1.0.0"
