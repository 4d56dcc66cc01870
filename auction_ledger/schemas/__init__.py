"""Pydantic Schemas — snapshot views and request validation.

Invariants:
    - Views are what subscribers and API clients see, never ORM rows
    - Requests validate at the system boundary before any store call
"""
