"""
Noter Backend: Application Package
=====================================

What: A small notes service (create, list, fetch) over PostgreSQL.
Who:  Imported by the `noter` console script, Alembic, and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │      Server (lifecycle, signals)    │  ← connect, migrate, serve, shut down
    ├─────────────────────────────────────┤
    │        Routes (API Layer)           │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │      Repositories (SQL mapping)     │  ← Note insert / select
    ├─────────────────────────────────────┤
    │      Models & Schemas (Data)        │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │      Database (Persistence)         │  ← Pooled async engine, transactions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
