"""
Cashbook - Source Package

A finance tracker for small businesses and households: a ledger of
income and expense transactions, account balances, invoices, period
reports and AI-assisted receipt scanning.

DESIGN PRINCIPLES:
1. Reports are pure functions over explicit snapshots
2. AI suggests, human confirms, validation reports
3. Local storage is the source of truth, cloud backup is manual
4. Every ledger mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Cashbook Team"
