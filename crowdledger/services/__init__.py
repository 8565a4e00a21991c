"""Service Layer — orchestration between API routes and the ledger store / directory.

Invariants:
    - Services raise CrowdLedgerError subclasses; HTTP mapping happens in api/
"""
