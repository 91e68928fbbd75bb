"""
Expense Tracker - Source Package

A small personal ledger for recording day-to-day expenses and
reading back simple totals.

DESIGN PRINCIPLES:
1. Amounts are exact decimals, never floats
2. Fail early, fail visibly
3. Corrupt data is never partially trusted
4. Every store operation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
