"""Infrastructure Layer — database pool, change feed and logging setup.

Invariants:
    - Infrastructure never encodes auction rules
    - All database failures mapped to typed errors from core/errors.py
"""
