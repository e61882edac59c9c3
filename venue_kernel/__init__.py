"""
Venue Kernel - shared infrastructure for ingestion and reporting.

Provides:
- Declarative ORM base with UUID keys and Decimal money columns
- Engine/session management for PostgreSQL and SQLite
- Natural-key upsert primitive (INSERT ... ON CONFLICT)
- Structured JSON logging
- Injectable clock
- Typed exception hierarchy
"""

__version__ = "0.1.0"
