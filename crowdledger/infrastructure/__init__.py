"""Infrastructure Layer — persistence, identity verification, and cross-cutting concerns.

Invariants:
    - Infrastructure implements the protocols declared in core/repository_protocols.py
    - Every persistence failure leaves the process as StoreUnavailableError

Design Decisions:
    - Ledger store is the only module issuing writes against campaign funding columns
"""
