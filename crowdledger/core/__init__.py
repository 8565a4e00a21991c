"""Core Layer — pure ledger rules and value objects, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, models/, or db/
    - All functions are pure and deterministic

Design Decisions:
    - Functional core separated from imperative shell: the store runs these rules
      inside its transaction, the ledger runs them before opening one
"""
