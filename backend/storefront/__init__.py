"""
Storefront Backend — Application Package Initializer
=====================================================

What: Marks the `storefront` directory as a Python package.
Who:  Used by uvicorn (`uvicorn storefront.main:app`), pytest, and the services.

Architecture Note:
    The backend follows the same layered split for every resource:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← lookups, validation, file I/O
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Persistence (DB tables, JSON files)│
    └─────────────────────────────────────┘

    Catalog lookups (categories, products, services) go to the relational store.
    Pages, branding settings and email logs live in JSON files under DATA_ROOT.
"""

__version__ = "1.0.0"
