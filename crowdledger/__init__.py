"""CrowdLedger — campaign funding ledger service.

Invariants:
    - Importing the package has no side effects beyond defining __version__
"""

__version__ = "1.0.0"
