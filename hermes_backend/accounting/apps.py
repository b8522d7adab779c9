# accounting/apps.py

"""
ACCOUNTING APP CONFIG

Double-entry ledger per cooperative:
- Chart of accounts, journal entries/lines, fiscal periods
- Period close engine (validation gate, closing entries, balance snapshots,
  rollover) exposed through the close_fiscal_period management command
"""

from django.apps import AppConfig


class AccountingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "accounting"
    verbose_name = "Accounting"
