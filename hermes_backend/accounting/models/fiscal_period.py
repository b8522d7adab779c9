# accounting/models/fiscal_period.py

"""
======================================================
PATH: accounting/models/fiscal_period.py
======================================================
FISCAL PERIOD MODEL

A bounded date range inside which a cooperative records transactions
before the books for that range are closed.

Lifecycle:
- created open (by setup or by rollover when the previous period closes)
- closed exactly once by the period close service (is_closed, closed_at, closed_by)

Hard rules:
- end_date >= start_date
- at most one period per cooperative starts on a given date
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q

from cooperatives.models import Cooperative


class FiscalPeriod(models.Model):
    cooperative = models.ForeignKey(
        Cooperative,
        on_delete=models.PROTECT,
        related_name="fiscal_periods",
    )

    # Example: "2025-07" or "FY2025 Q3"
    name = models.CharField(max_length=50)

    start_date = models.DateField()
    end_date = models.DateField()

    is_closed = models.BooleanField(default=False)
    closed_at = models.DateTimeField(null=True, blank=True)
    closed_by = models.CharField(max_length=150, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["cooperative", "start_date"]
        verbose_name = "Fiscal Period"
        verbose_name_plural = "Fiscal Periods"
        indexes = [
            models.Index(fields=["cooperative", "is_closed"], name="period_coop_closed_idx"),
            models.Index(fields=["end_date"], name="period_end_date_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["cooperative", "start_date"],
                name="uniq_period_cooperative_start",
            ),
            models.CheckConstraint(
                condition=Q(end_date__gte=F("start_date")),
                name="chk_period_end_gte_start",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.start_date} → {self.end_date})"

    @property
    def length_days(self) -> int:
        return (self.end_date - self.start_date).days

    def clean(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationError({"name": "Period name is required"})

        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({"end_date": "end_date must be >= start_date"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
