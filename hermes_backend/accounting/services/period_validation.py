# accounting/services/period_validation.py

"""
======================================================
PATH: accounting/services/period_validation.py
======================================================
PERIOD VALIDATION GATE

Pre-close checks for one fiscal period. Every check runs; nothing
short-circuits, so the operator sees the full list at once.

Errors (block the close unless forced):
- period already closed
- journal entries whose lines do not balance (|Dr - Cr| > 0.01)
- trial balance not balanced

Warnings (need confirmation unless forced):
- period end date not yet passed
- unapproved journal entries in range
- pending savings / loan payment transactions in range
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from django.utils import timezone

from accounting.services.exceptions import PeriodValidationError
from accounting.services.ledger_store import get_ledger_store
from accounting.services.trial_balance_service import TrialBalanceService

logger = logging.getLogger(__name__)

MAX_LISTED_REFERENCES = 10

PENDING_TYPE_LABELS = {
    "savings": "savings",
    "loan_payments": "loan payments",
}


@dataclass(frozen=True)
class PeriodValidationResult:
    can_close: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def raise_for_errors(self) -> None:
        if self.errors:
            raise PeriodValidationError(self.errors)


def _unbalanced_message(entries) -> str:
    refs = [e.reference_number for e in entries[:MAX_LISTED_REFERENCES]]
    msg = f"Found {len(entries)} unbalanced journal entries"
    if refs:
        more = " ..." if len(entries) > MAX_LISTED_REFERENCES else ""
        msg += f": {', '.join(refs)}{more}"
    return msg


def _pending_message(pending) -> str:
    total = sum(p["count"] for p in pending)
    breakdown = ", ".join(
        f"{PENDING_TYPE_LABELS.get(p['type'], p['type'])}: {p['count']}" for p in pending
    )
    return f"Found {total} pending transactions ({breakdown})"


def validate_period_for_closing(period, *, today=None, store=None) -> PeriodValidationResult:
    store = store or get_ledger_store()
    today = today or timezone.localdate()

    errors: list[str] = []
    warnings: list[str] = []

    if period.is_closed:
        errors.append("Period is already closed")

    if period.end_date > today:
        warnings.append("Period end date has not yet passed")

    unbalanced = store.get_unbalanced_entries(period)
    if unbalanced:
        errors.append(_unbalanced_message(unbalanced))

    unapproved = store.get_unapproved_entries(period)
    if unapproved:
        warnings.append(f"Found {len(unapproved)} unapproved journal entries")

    pending = store.get_pending_transactions(period)
    if pending:
        warnings.append(_pending_message(pending))

    trial_balance = TrialBalanceService(store=store).validate_period(period)
    if not trial_balance.balanced:
        errors.append(
            f"Trial balance is not balanced. Difference: {trial_balance.difference}"
        )

    logger.debug(
        "Period validation finished",
        extra={
            "period_id": period.id,
            "cooperative_id": period.cooperative_id,
            "error_count": len(errors),
            "warning_count": len(warnings),
        },
    )

    return PeriodValidationResult(
        can_close=not errors,
        errors=errors,
        warnings=warnings,
    )
