# accounting/services/period_rollover.py

"""
PERIOD ROLLOVER

After a period closes, open its successor unless one already exists.

- next_start = end_date + 1 day
- next_end   = next_start + (end_date - start_date) days
- name: first "YYYY-MM" in the current name advanced one month
  (December rolls to January of the next year); otherwise "<name> - Next"

A period already starting on next_start (same cooperative) means no-op.
"""

from __future__ import annotations

import logging
import re
from datetime import timedelta

from accounting.services.ledger_store import get_ledger_store

logger = logging.getLogger(__name__)

_YEAR_MONTH = re.compile(r"(\d{4})-(\d{2})")


def next_period_name(name: str) -> str:
    match = _YEAR_MONTH.search(name or "")
    if not match:
        return f"{name} - Next"

    year = int(match.group(1))
    month = int(match.group(2)) + 1
    if month > 12:
        month = 1
        year += 1
    return f"{year:04d}-{month:02d}"


def next_period_dates(period):
    next_start = period.end_date + timedelta(days=1)
    return next_start, next_start + timedelta(days=period.length_days)


def create_next_period_if_needed(period, *, store=None):
    """Returns the new FiscalPeriod, or None when a successor already exists."""
    store = store or get_ledger_store()

    next_start, next_end = next_period_dates(period)

    if store.find_period_starting_on(period.cooperative_id, next_start):
        logger.debug(
            "Next fiscal period already exists",
            extra={"period_id": period.id, "cooperative_id": period.cooperative_id},
        )
        return None

    created = store.insert_fiscal_period(
        cooperative_id=period.cooperative_id,
        name=next_period_name(period.name),
        start_date=next_start,
        end_date=next_end,
        is_closed=False,
    )

    logger.info(
        "Next fiscal period created",
        extra={
            "period_id": period.id,
            "cooperative_id": period.cooperative_id,
            "next_period_id": created.id,
            "next_start": next_start.isoformat(),
            "next_end": next_end.isoformat(),
        },
    )
    return created
