"""
NoteDesk Backend — Application Package Initializer
===================================================

What: Marks the `notedesk` directory as a Python package.
Who:  Imported by uvicorn (`notedesk.main:app`), Alembic and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │   Route Guard (page middleware)     │  ← session cookies → identity
    ├─────────────────────────────────────┤
    │   Routes (HTTP transport, pages)    │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Routers (typed RPC procedures)    │  ← auth check, input schemas
    ├─────────────────────────────────────┤
    │   Repositories (owner-scoped data)  │  ← one row in, one row out
    ├─────────────────────────────────────┤
    │   Database (async SQLAlchemy)       │  ← hosted PostgreSQL
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
