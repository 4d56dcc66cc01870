"""Services Layer — ledger store, transaction engine, setup operations, bid coordinator.

Invariants:
    - Every mutation of teams, players or auction state goes through a ledger transaction
    - Services read a snapshot, ask core/ for a verdict, then write

Design Decisions:
    - One file per component for locality
"""
