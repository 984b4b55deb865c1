"""
Carpool Ledger

Tracks shared-car usage among a group of people: who drove whom, on which
car, and what each person owes based on per-person, per-car rates adjusted
by manual credits and debits.

DESIGN PRINCIPLES:
1. Balances are always recomputed from the source records, never stored
2. Records pointing at deleted cars or people are skipped, never fatal
3. Rejected input leaves the ledger untouched
4. The in-memory ledger is authoritative; saving is best-effort
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Carpool Ledger Team"
