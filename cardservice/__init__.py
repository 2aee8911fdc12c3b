"""
Card Service — Application Package
====================================

What:  HTTP CRUD service for rectangle "cards" stored in MongoDB, plus an
       HTML detail view.

Architecture:

    ┌─────────────────────────────────────┐
    │      Server Lifecycle (server.py)   │  ← connect, listen, drain, stop
    ├─────────────────────────────────────┤
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │      Services (Card Operations)     │  ← parse, validate, call store
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← Card document + acknowledgments
    ├─────────────────────────────────────┤
    │     Database (Store Adapter)        │  ← PyMongo asyncio client
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
