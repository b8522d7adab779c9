# PATH: accounting/services/period_close_service.py

"""
PERIOD CLOSE SERVICE

Closes fiscal periods, one at a time, and reports what happened as a
ClosingOutcome instead of raising.

Per period:
- already closed                  -> already_closed (nothing written)
- validation errors, no force     -> blocked
- warnings, no force, not confirmed -> skipped
- dry_run                         -> dry_run (read-only preview)
- otherwise, in ONE transaction:
    lock period row, re-check is_closed,
    closing entries -> balance snapshots -> report records
    -> mark closed -> create next period
  any failure rolls all of it back -> failed

Guarantees:
- Atomic: a failed close leaves no entries, snapshots or is_closed flag
- No double close: row lock + conditional is_closed update
- Batch isolation: one period failing never stops the others
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum

from django.utils import timezone

from accounting.services.balance_snapshot import snapshot_balances
from accounting.services.closing_entries import (
    ClosingEntriesResult,
    ClosingPreview,
    generate_closing_entries,
    preview_closing_entries,
)
from accounting.services.exceptions import (
    ClosingTransactionError,
    FiscalPeriodClosedError,
)
from accounting.services.ledger_store import get_ledger_store
from accounting.services.period_reports import record_period_end_reports
from accounting.services.period_rollover import create_next_period_if_needed
from accounting.services.period_validation import validate_period_for_closing
from accounting.services.system_accounts import accounting_setting

logger = logging.getLogger("accounting.closing")


class ClosingStatus(str, Enum):
    CLOSED = "closed"
    DRY_RUN = "dry_run"
    ALREADY_CLOSED = "already_closed"
    SKIPPED = "skipped"
    BLOCKED = "blocked"
    FAILED = "failed"


SUCCESS_STATUSES = (ClosingStatus.CLOSED, ClosingStatus.DRY_RUN)
WARNING_STATUSES = (ClosingStatus.ALREADY_CLOSED, ClosingStatus.SKIPPED)
ERROR_STATUSES = (ClosingStatus.BLOCKED, ClosingStatus.FAILED)


@dataclass(frozen=True)
class ClosingOutcome:
    period_id: int
    cooperative_id: int
    period_name: str
    status: ClosingStatus
    message: str = ""
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    forced: bool = False
    closing: ClosingEntriesResult | None = None
    preview: ClosingPreview | None = None
    next_period_id: int | None = None

    @property
    def severity(self) -> str:
        if self.status in SUCCESS_STATUSES:
            return "success"
        if self.status in WARNING_STATUSES:
            return "warning"
        return "error"


@dataclass
class ClosingSummary:
    outcomes: list[ClosingOutcome] = field(default_factory=list)
    dry_run: bool = False
    elapsed_seconds: float = 0.0

    def _count(self, severity: str) -> int:
        return sum(1 for o in self.outcomes if o.severity == severity)

    @property
    def success_count(self) -> int:
        return self._count("success")

    @property
    def warning_count(self) -> int:
        return self._count("warning")

    @property
    def error_count(self) -> int:
        return self._count("error")

    @property
    def has_errors(self) -> bool:
        return self.error_count > 0


def _outcome(period, status, message="", **kwargs) -> ClosingOutcome:
    return ClosingOutcome(
        period_id=period.id,
        cooperative_id=period.cooperative_id,
        period_name=period.name,
        status=status,
        message=message,
        **kwargs,
    )


def _log_ctx(period, **extra) -> dict:
    return {"period_id": period.id, "cooperative_id": period.cooperative_id, **extra}


def select_periods(*, cooperative_id=None, period_id=None, auto=False, today=None, store=None):
    """
    Open periods to process, ordered by end_date.

    period_id wins over the other filters. An explicit period_id that is
    already closed is still returned so it can be reported as such.
    """
    store = store or get_ledger_store()

    periods = store.find_open_periods(
        cooperative_id=cooperative_id,
        period_id=period_id,
        only_overdue=auto,
        today=today,
    )
    if period_id is not None and not periods:
        period = store.get_period(period_id)
        if period is not None:
            periods = [period]
    return periods


def _run_closing_transaction(period, *, store, run_date, closed_by):
    def _close():
        locked = store.lock_period(period.id)
        if locked.is_closed:
            raise FiscalPeriodClosedError(f"Period {locked.id} was closed concurrently")

        closing = generate_closing_entries(
            locked, store=store, run_date=run_date, created_by=closed_by
        )
        snapshot_balances(locked, store=store)
        record_period_end_reports(locked, store=store, generated_by=closed_by)

        if not store.mark_period_closed(locked.id, closed_by):
            raise FiscalPeriodClosedError(f"Period {locked.id} was closed concurrently")

        next_period = create_next_period_if_needed(locked, store=store)
        return closing, next_period

    try:
        return store.run_in_transaction(_close)
    except FiscalPeriodClosedError:
        raise
    except Exception as exc:
        raise ClosingTransactionError(f"Failed to close period {period.id}: {exc}") from exc


def close_period(
    period,
    *,
    force: bool = False,
    dry_run: bool = False,
    confirm=None,
    today=None,
    store=None,
    closed_by: str | None = None,
) -> ClosingOutcome:
    """
    Close ONE fiscal period.

    confirm(period, warnings) -> bool is asked when warnings exist and
    force is off; None means non-interactive (warnings skip the period).
    """
    store = store or get_ledger_store()
    today = today or timezone.localdate()
    closed_by = closed_by or accounting_setting("SYSTEM_USER")

    if period.is_closed:
        return _outcome(period, ClosingStatus.ALREADY_CLOSED, "Period is already closed")

    validation = validate_period_for_closing(period, today=today, store=store)
    errors = list(validation.errors)
    warnings = list(validation.warnings)

    if errors and not force:
        logger.warning(
            "Period close blocked by validation errors",
            extra=_log_ctx(period, errors=errors),
        )
        return _outcome(
            period,
            ClosingStatus.BLOCKED,
            "Validation failed",
            errors=errors,
            warnings=warnings,
        )

    if errors:
        logger.warning(
            "FORCED close: bypassing validation errors",
            extra=_log_ctx(period, errors=errors),
        )

    if warnings and not force:
        if confirm is None or not confirm(period, warnings):
            return _outcome(
                period,
                ClosingStatus.SKIPPED,
                "Skipped due to warnings",
                errors=errors,
                warnings=warnings,
            )

    if dry_run:
        preview = preview_closing_entries(period, store=store)
        return _outcome(
            period,
            ClosingStatus.DRY_RUN,
            "Dry run completed",
            errors=errors,
            warnings=warnings,
            forced=force,
            preview=preview,
        )

    try:
        closing, next_period = _run_closing_transaction(
            period, store=store, run_date=today, closed_by=closed_by
        )
    except FiscalPeriodClosedError as exc:
        logger.warning("Period already closed", extra=_log_ctx(period))
        return _outcome(period, ClosingStatus.ALREADY_CLOSED, str(exc))
    except ClosingTransactionError as exc:
        cause = exc.__cause__ or exc
        logger.error(
            "Failed to close fiscal period %s",
            period.id,
            exc_info=cause,
            extra=_log_ctx(period, error=str(cause)),
        )
        return _outcome(
            period,
            ClosingStatus.FAILED,
            str(cause),
            errors=errors,
            warnings=warnings,
            forced=force,
        )

    logger.info(
        "Fiscal period closed",
        extra=_log_ctx(
            period,
            forced=force,
            entries=len(closing.entries),
            net_income=str(closing.net_income),
        ),
    )

    return _outcome(
        period,
        ClosingStatus.CLOSED,
        "Period closed successfully",
        errors=errors,
        warnings=warnings,
        forced=force,
        closing=closing,
        next_period_id=getattr(next_period, "id", None),
    )


def close_periods(
    periods,
    *,
    force: bool = False,
    dry_run: bool = False,
    confirm=None,
    today=None,
    store=None,
    on_outcome=None,
) -> ClosingSummary:
    """
    Close periods sequentially. Each period is independent: an unexpected
    error on one is recorded as failed and the loop carries on.
    """
    store = store or get_ledger_store()
    started = time.monotonic()
    summary = ClosingSummary(dry_run=dry_run)

    for period in periods:
        try:
            outcome = close_period(
                period,
                force=force,
                dry_run=dry_run,
                confirm=confirm,
                today=today,
                store=store,
            )
        except Exception as exc:
            logger.exception(
                "Unexpected error while closing fiscal period %s",
                period.id,
                extra=_log_ctx(period, error=str(exc)),
            )
            outcome = _outcome(period, ClosingStatus.FAILED, str(exc))

        summary.outcomes.append(outcome)
        if on_outcome is not None:
            on_outcome(outcome)

    summary.elapsed_seconds = time.monotonic() - started

    logger.info(
        "Fiscal period closing completed",
        extra={
            "periods_processed": len(summary.outcomes),
            "successful_closures": summary.success_count,
            "warnings": summary.warning_count,
            "errors": summary.error_count,
            "execution_time": round(summary.elapsed_seconds, 3),
            "dry_run": dry_run,
        },
    )
    return summary
