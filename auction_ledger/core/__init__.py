"""Core Layer — pure auction rules, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic (randomness injected by caller)

Design Decisions:
    - Functional core separated from imperative shell: the transaction engine
      reads a snapshot, asks core for a verdict, then writes
"""
