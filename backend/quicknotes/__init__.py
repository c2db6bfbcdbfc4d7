"""
QuickNotes Backend — Application Package Initializer
====================================================

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Validation + CRUD)      │  ← bounds checks, store calls
    ├─────────────────────────────────────┤
    │  Models & Schemas (Data + Mapper)   │  ← BSON documents, API contracts
    ├─────────────────────────────────────┤
    │  Database (Connection Manager)      │  ← cached Motor client
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
