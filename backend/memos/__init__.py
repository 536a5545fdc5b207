"""
Memos Backend - Application Package Initializer
================================================

What:  Marks the `memos` directory as a Python package.
Who:   Imported by uvicorn (`memos.main:app`), Alembic, and pytest.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Memo, user, tag, resource rules
    ├─────────────────────────────────────┤
    │  Security & Markdown (Pure codecs)  │  ← Token signing, node parsing
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │  Database & Object Store (Storage)  │  ← Async sessions, blob backends
    └─────────────────────────────────────┘

    Routes translate HTTP into service calls; services own the rules and can
    be exercised without HTTP; the codecs in `security` and `markdown` are
    pure functions with no I/O.
"""

__version__ = "0.24.0"
