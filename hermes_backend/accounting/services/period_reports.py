# accounting/services/period_reports.py

"""
PERIOD-END REPORT RECORDS

Marks the standard statements as generated for a period being closed.
Only metadata is stored; rendering lives outside this engine.

Each report is written under its own savepoint: one failing report is
logged and skipped, the close carries on.
"""

from __future__ import annotations

import logging

from django.db import transaction

from accounting.models.period_report import PeriodEndReport
from accounting.services.ledger_store import get_ledger_store
from accounting.services.system_accounts import accounting_setting

logger = logging.getLogger(__name__)

PERIOD_END_REPORT_TYPES = (
    PeriodEndReport.ReportType.BALANCE_SHEET,
    PeriodEndReport.ReportType.INCOME_STATEMENT,
    PeriodEndReport.ReportType.CASH_FLOW,
    PeriodEndReport.ReportType.EQUITY_CHANGES,
)


def record_period_end_reports(period, *, store=None, generated_by=None) -> list[str]:
    store = store or get_ledger_store()
    generated_by = generated_by or accounting_setting("SYSTEM_USER")

    recorded = []
    for report_type in PERIOD_END_REPORT_TYPES:
        try:
            with transaction.atomic():
                store.upsert_period_report(
                    cooperative_id=period.cooperative_id,
                    fiscal_period_id=period.id,
                    report_type=report_type,
                    generated_by=generated_by,
                )
        except Exception as exc:
            logger.warning(
                "Failed to record %s report for period %s",
                report_type,
                period.id,
                extra={"period_id": period.id, "cooperative_id": period.cooperative_id, "error": str(exc)},
            )
            continue
        recorded.append(str(report_type))

    return recorded
