# accounting/models/journal.py

"""
======================================================
PATH: accounting/models/journal.py
======================================================
JOURNAL ENTRY MODEL

Represents a single accounting transaction (journal header).

Rules:
- transaction_date is the accounting effective date (period membership, reports)
- only approved entries count toward balances
- closing entries are system-generated and created pre-approved
- reference_number is unique per cooperative
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models

from accounting.models.fiscal_period import FiscalPeriod
from cooperatives.models import Cooperative


class JournalEntry(models.Model):
    cooperative = models.ForeignKey(
        Cooperative,
        on_delete=models.PROTECT,
        related_name="journal_entries",
    )

    fiscal_period = models.ForeignKey(
        FiscalPeriod,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="journal_entries",
    )

    reference_number = models.CharField(max_length=100)

    transaction_date = models.DateField(help_text="Accounting effective date")

    description = models.TextField(help_text="Narrative description of the journal entry")

    is_approved = models.BooleanField(default=False)

    is_closing_entry = models.BooleanField(
        default=False,
        help_text="System-generated period closing entry",
    )

    created_by = models.CharField(max_length=150, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-transaction_date", "-created_at"]
        indexes = [
            models.Index(
                fields=["cooperative", "transaction_date"],
                name="je_coop_date_idx",
            ),
            models.Index(
                fields=["cooperative", "is_approved"],
                name="je_coop_approved_idx",
            ),
            models.Index(fields=["is_closing_entry"], name="je_closing_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["cooperative", "reference_number"],
                name="uniq_journal_cooperative_reference",
            )
        ]
        verbose_name = "Journal Entry"
        verbose_name_plural = "Journal Entries"

    def __str__(self):
        return f"JournalEntry {self.reference_number} – {self.transaction_date}"

    def clean(self):
        self.reference_number = (self.reference_number or "").strip()
        if not self.reference_number:
            raise ValidationError("Journal entry reference_number is required")

        self.description = (self.description or "").strip()
        if not self.description:
            raise ValidationError("Journal entry description is required")

        if self.fiscal_period_id and self.fiscal_period.cooperative_id != self.cooperative_id:
            raise ValidationError(
                {"fiscal_period": "Fiscal period belongs to a different cooperative"}
            )

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
