# accounting/models/account_balance.py

"""
ACCOUNT BALANCE SNAPSHOT

Point-in-time balance of one account as of a fiscal period's end date,
written when the period closes. Used for comparative statements across
periods.

One row per (account, fiscal_period); re-running the snapshot overwrites it.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models

from accounting.models.account import Account
from accounting.models.fiscal_period import FiscalPeriod
from cooperatives.models import Cooperative


class AccountBalance(models.Model):
    cooperative = models.ForeignKey(
        Cooperative,
        on_delete=models.PROTECT,
        related_name="account_balances",
    )
    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="period_balances",
    )
    fiscal_period = models.ForeignKey(
        FiscalPeriod,
        on_delete=models.PROTECT,
        related_name="account_balances",
    )

    ending_balance = models.DecimalField(
        max_digits=16,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Normal-side balance (debit-normal: Dr-Cr, credit-normal: Cr-Dr)",
    )
    balance_date = models.DateField()

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["fiscal_period", "account__code"]
        constraints = [
            models.UniqueConstraint(
                fields=["account", "fiscal_period"],
                name="uniq_account_balance_account_period",
            ),
        ]

    def __str__(self):
        return f"{self.account} @ {self.balance_date}: {self.ending_balance}"
