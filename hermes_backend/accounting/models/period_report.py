# accounting/models/period_report.py

"""
PERIOD-END REPORT RECORD

Metadata row marking that a period-end statement was generated for a
closed period. Rendering (PDF / Excel) happens elsewhere; this table only
records what exists and when it was produced.
"""

from __future__ import annotations

from django.db import models
from django.utils import timezone

from accounting.models.fiscal_period import FiscalPeriod
from cooperatives.models import Cooperative


class PeriodEndReport(models.Model):
    class ReportType(models.TextChoices):
        BALANCE_SHEET = "balance_sheet", "Balance Sheet"
        INCOME_STATEMENT = "income_statement", "Income Statement"
        CASH_FLOW = "cash_flow", "Cash Flow"
        EQUITY_CHANGES = "equity_changes", "Statement of Changes in Equity"

    cooperative = models.ForeignKey(
        Cooperative,
        on_delete=models.PROTECT,
        related_name="period_end_reports",
    )
    fiscal_period = models.ForeignKey(
        FiscalPeriod,
        on_delete=models.PROTECT,
        related_name="period_end_reports",
    )

    report_type = models.CharField(max_length=32, choices=ReportType.choices)

    generated_at = models.DateTimeField(default=timezone.now)
    generated_by = models.CharField(max_length=150, blank=True, default="")
    is_period_end_report = models.BooleanField(default=True)

    class Meta:
        ordering = ["fiscal_period", "report_type"]
        constraints = [
            models.UniqueConstraint(
                fields=["fiscal_period", "report_type"],
                name="uniq_period_report_type",
            ),
        ]

    def __str__(self):
        return f"{self.get_report_type_display()} – {self.fiscal_period}"
