# accounting/models/__init__.py

"""
ACCOUNTING MODELS PACKAGE EXPORTS

Note:
- Keep this file *imports-only* (no business logic).
- Do NOT import services from models anywhere (models must stay pure).
"""

from accounting.models.account import Account
from accounting.models.account_balance import AccountBalance
from accounting.models.fiscal_period import FiscalPeriod
from accounting.models.journal import JournalEntry
from accounting.models.journal_line import JournalLine
from accounting.models.period_report import PeriodEndReport

__all__ = [
    "Account",
    "FiscalPeriod",
    "JournalEntry",
    "JournalLine",
    "AccountBalance",
    "PeriodEndReport",
]
