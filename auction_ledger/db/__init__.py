"""Database Layer — declarative Base shared by models and migrations.

Invariants:
    - All sessions are async (AsyncSession)

Design Decisions:
    - asyncpg driver for PostgreSQL, aiosqlite for tests (native async, no thread pool)
"""
