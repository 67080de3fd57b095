"""
Blog API — Application Package
================================

Layered architecture:

    ┌─────────────────────────────────────┐
    │        Routes (API Layer)           │  ← HTTP binding only
    ├─────────────────────────────────────┤
    │  Services (Business Logic)          │  ← ownership checks, slugs,
    │  Authenticator · Authorization      │    revisions, uniqueness
    ├─────────────────────────────────────┤
    │  Repositories (explicit queries)    │  ← one method per access pattern
    ├─────────────────────────────────────┤
    │  Models & Schemas (Data)            │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │  Database (Persistence)             │  ← async engine + sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
