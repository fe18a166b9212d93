"""
SPA Images Backend: Application Package Initializer
====================================================

REST backend for the "Immagini Casuali" single-page app: CRUD over image
records (url, description, rating, display position).

Architecture Note:

    ┌─────────────────────────────────────┐
    │   Middleware (request id, logging,  │  ← cross-cutting, CORS/OPTIONS
    │   CORS)                             │
    ├─────────────────────────────────────┤
    │   Routes + route table (router.py)  │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (validation, storage)    │  ← rules and persistence calls
    ├─────────────────────────────────────┤
    │   Models & Schemas (Data)           │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Database (Persistence)            │  ← async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
