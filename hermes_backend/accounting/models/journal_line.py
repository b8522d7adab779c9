# accounting/models/journal_line.py

"""
======================================================
PATH: accounting/models/journal_line.py
======================================================
JOURNAL LINE MODEL

A debit or credit posting to a single account, owned by one JournalEntry.

Rules:
- debit_amount and credit_amount are never negative
- in normal usage exactly one side is non-zero
- per entry, SUM(debit) == SUM(credit) within 0.01 (checked by the period
  close gate; never repaired here)
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from accounting.models.account import Account
from accounting.models.journal import JournalEntry


class JournalLine(models.Model):
    journal_entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.CASCADE,
        related_name="lines",
    )

    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="journal_lines",
    )

    debit_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    credit_amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    description = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Journal Line"
        verbose_name_plural = "Journal Lines"
        ordering = ["id"]
        indexes = [
            models.Index(fields=["account"], name="jl_account_idx"),
            models.Index(fields=["journal_entry"], name="jl_entry_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(debit_amount__gte=0),
                name="chk_journal_line_debit_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(credit_amount__gte=0),
                name="chk_journal_line_credit_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.account} Dr {self.debit_amount} Cr {self.credit_amount}"

    def clean(self):
        if (
            self.account_id
            and self.journal_entry_id
            and self.account.cooperative_id != self.journal_entry.cooperative_id
        ):
            raise ValidationError(
                {"account": "Account belongs to a different cooperative than the entry"}
            )

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
