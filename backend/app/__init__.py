"""
NotaryPro Backend — Application Package Initializer
=====================================================

What: Marks the `app` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, access control
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Certification workflow, commissions
    ├─────────────────────────────────────┤
    │      Repositories (Data Access)     │  ← Typed queries per entity
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never touch the ORM directly; services receive the session and
    their repositories explicitly, so every layer can be tested in isolation.
"""

__version__ = "1.0.0"
