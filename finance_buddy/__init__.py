"""
Finance Buddy - Source Package

An in-memory personal-finance ledger: accounts with append-only
transaction histories, deposits, withdrawals, transfers, a single-step
undo and a flat-file snapshot.

DESIGN PRINCIPLES:
1. Every balance change is paired with exactly one transaction record
2. Failed operations change nothing
3. No exceptions reach the frontend: every operation returns an outcome
4. Every step is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Buddy Team"
