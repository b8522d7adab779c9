# accounting/tests/test_period_close_service.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from accounting.models import AccountBalance, FiscalPeriod, JournalEntry, PeriodEndReport
from accounting.services.exceptions import LedgerStoreError
from accounting.services.ledger_store import DjangoLedgerStore
from accounting.services.period_close_service import (
    ClosingStatus,
    close_period,
    close_periods,
    select_periods,
)
from accounting.tests.helpers import make_cooperative, make_period, post_entry, standard_chart

TODAY = date(2024, 2, 5)


class _FailingSnapshotStore(DjangoLedgerStore):
    """Blows up mid-transaction for one cooperative."""

    def __init__(self, cooperative_id):
        self.cooperative_id = cooperative_id

    def upsert_account_balance(self, *, cooperative_id, **kwargs):
        if cooperative_id == self.cooperative_id:
            raise LedgerStoreError("disk full")
        return super().upsert_account_balance(cooperative_id=cooperative_id, **kwargs)


class _BrokenReadStore(DjangoLedgerStore):
    def get_unbalanced_entries(self, period):
        raise RuntimeError("connection reset")


def _seed_activity(coop, accounts, prefix="JE"):
    post_entry(
        coop,
        f"{prefix}-REV",
        date(2024, 1, 10),
        [(accounts["cash"], "1000.00", "0"), (accounts["revenue"], "0", "1000.00")],
    )
    post_entry(
        coop,
        f"{prefix}-EXP",
        date(2024, 1, 15),
        [(accounts["expense"], "400.00", "0"), (accounts["cash"], "0", "400.00")],
    )


class ClosePeriodTests(TestCase):
    def setUp(self):
        self.coop = make_cooperative()
        self.period = make_period(self.coop)
        self.accounts = standard_chart(self.coop)
        _seed_activity(self.coop, self.accounts)

    def _closing_entries(self):
        return JournalEntry.objects.filter(cooperative=self.coop, is_closing_entry=True)

    def test_close_runs_the_full_sequence(self):
        outcome = close_period(self.period, today=TODAY)

        self.assertEqual(outcome.status, ClosingStatus.CLOSED)
        self.assertEqual(outcome.severity, "success")
        self.assertEqual(outcome.closing.net_income, Decimal("600.00"))

        self.period.refresh_from_db()
        self.assertTrue(self.period.is_closed)
        self.assertIsNotNone(self.period.closed_at)
        self.assertEqual(self.period.closed_by, "system")

        self.assertEqual(self._closing_entries().count(), 3)

        # 5 chart accounts + Income Summary + Retained Earnings
        self.assertEqual(AccountBalance.objects.filter(fiscal_period=self.period).count(), 7)
        revenue_snapshot = AccountBalance.objects.get(fiscal_period=self.period, account=self.accounts["revenue"])
        self.assertEqual(revenue_snapshot.ending_balance, Decimal("0.00"))
        retained = AccountBalance.objects.get(fiscal_period=self.period, account__code="3200")
        self.assertEqual(retained.ending_balance, Decimal("600.00"))

        self.assertEqual(PeriodEndReport.objects.filter(fiscal_period=self.period).count(), 4)

        successor = FiscalPeriod.objects.get(pk=outcome.next_period_id)
        self.assertEqual(successor.name, "2024-02")
        self.assertEqual(successor.start_date, date(2024, 2, 1))
        self.assertFalse(successor.is_closed)

    def test_no_double_close(self):
        first = close_period(self.period, today=TODAY)
        self.assertEqual(first.status, ClosingStatus.CLOSED)

        # stale in-memory instance: caught by the row re-check
        stale = close_period(self.period, today=TODAY)
        self.period.refresh_from_db()
        fresh = close_period(self.period, today=TODAY)

        self.assertEqual(stale.status, ClosingStatus.ALREADY_CLOSED)
        self.assertEqual(fresh.status, ClosingStatus.ALREADY_CLOSED)
        self.assertEqual(fresh.severity, "warning")
        self.assertEqual(self._closing_entries().count(), 3)
        self.assertEqual(FiscalPeriod.objects.filter(cooperative=self.coop).count(), 2)

    def test_dry_run_writes_nothing(self):
        outcome = close_period(self.period, today=TODAY, dry_run=True)

        self.assertEqual(outcome.status, ClosingStatus.DRY_RUN)
        self.assertEqual(outcome.preview.revenue_accounts, 1)
        self.assertEqual(outcome.preview.expense_accounts, 1)
        self.assertEqual(outcome.preview.net_income, Decimal("600.00"))

        self.period.refresh_from_db()
        self.assertFalse(self.period.is_closed)
        self.assertFalse(self._closing_entries().exists())
        self.assertFalse(AccountBalance.objects.exists())
        self.assertFalse(PeriodEndReport.objects.exists())
        self.assertEqual(FiscalPeriod.objects.count(), 1)

    def test_validation_errors_block_the_close(self):
        post_entry(
            self.coop,
            "JE-BAD",
            date(2024, 1, 20),
            [(self.accounts["cash"], "100.00", "0"), (self.accounts["revenue"], "0", "90.00")],
        )

        with self.assertLogs("accounting.closing", level="WARNING") as logs:
            outcome = close_period(self.period, today=TODAY)

        self.assertEqual(outcome.status, ClosingStatus.BLOCKED)
        self.assertTrue(any("blocked by validation errors" in line for line in logs.output))
        self.assertFalse(any("FORCED" in line for line in logs.output))
        self.assertEqual(outcome.severity, "error")
        self.assertEqual(len(outcome.errors), 2)
        self.period.refresh_from_db()
        self.assertFalse(self.period.is_closed)
        self.assertFalse(self._closing_entries().exists())

    def test_force_bypasses_errors_and_is_logged(self):
        post_entry(
            self.coop,
            "JE-BAD",
            date(2024, 1, 20),
            [(self.accounts["cash"], "100.00", "0"), (self.accounts["revenue"], "0", "90.00")],
        )

        with self.assertLogs("accounting.closing", level="WARNING") as logs:
            outcome = close_period(self.period, today=TODAY, force=True)

        self.assertEqual(outcome.status, ClosingStatus.CLOSED)
        self.assertTrue(outcome.forced)
        self.assertTrue(any("FORCED" in line for line in logs.output))
        self.period.refresh_from_db()
        self.assertTrue(self.period.is_closed)

    def test_warnings_without_confirmation_skip(self):
        post_entry(
            self.coop,
            "JE-DRAFT",
            date(2024, 1, 25),
            [(self.accounts["cash"], "10.00", "0"), (self.accounts["revenue"], "0", "10.00")],
            approved=False,
        )

        outcome = close_period(self.period, today=TODAY)

        self.assertEqual(outcome.status, ClosingStatus.SKIPPED)
        self.assertEqual(outcome.warnings, ["Found 1 unapproved journal entries"])
        self.period.refresh_from_db()
        self.assertFalse(self.period.is_closed)

    def test_confirm_callback_decides_on_warnings(self):
        asked = []

        def decline(period, warnings):
            asked.append(list(warnings))
            return False

        before_end = date(2024, 1, 30)
        outcome = close_period(self.period, today=before_end, confirm=decline)
        self.assertEqual(outcome.status, ClosingStatus.SKIPPED)
        self.assertEqual(asked, [["Period end date has not yet passed"]])

        outcome = close_period(self.period, today=before_end, confirm=lambda p, w: True)
        self.assertEqual(outcome.status, ClosingStatus.CLOSED)

    def test_failure_inside_transaction_rolls_back(self):
        outcome = close_period(self.period, today=TODAY, store=_FailingSnapshotStore(self.coop.id))

        self.assertEqual(outcome.status, ClosingStatus.FAILED)
        self.assertIn("disk full", outcome.message)
        self.period.refresh_from_db()
        self.assertFalse(self.period.is_closed)
        self.assertFalse(self._closing_entries().exists())
        self.assertFalse(AccountBalance.objects.exists())
        self.assertEqual(FiscalPeriod.objects.count(), 1)


class ClosePeriodsBatchTests(TestCase):
    def setUp(self):
        self.coop_a = make_cooperative(code="koperasi-a", name="Koperasi A")
        self.coop_b = make_cooperative(code="koperasi-b", name="Koperasi B")
        self.period_a = make_period(self.coop_a)
        self.period_b = make_period(self.coop_b)
        _seed_activity(self.coop_a, standard_chart(self.coop_a), prefix="A")
        _seed_activity(self.coop_b, standard_chart(self.coop_b), prefix="B")

    def test_one_failing_period_does_not_stop_the_batch(self):
        summary = close_periods(
            [self.period_a, self.period_b],
            today=TODAY,
            store=_FailingSnapshotStore(self.coop_a.id),
        )

        statuses = [o.status for o in summary.outcomes]
        self.assertEqual(statuses, [ClosingStatus.FAILED, ClosingStatus.CLOSED])
        self.assertEqual(summary.error_count, 1)
        self.assertEqual(summary.success_count, 1)
        self.assertTrue(summary.has_errors)

        self.period_a.refresh_from_db()
        self.period_b.refresh_from_db()
        self.assertFalse(self.period_a.is_closed)
        self.assertTrue(self.period_b.is_closed)
        self.assertFalse(JournalEntry.objects.filter(cooperative=self.coop_a, is_closing_entry=True).exists())
        self.assertFalse(FiscalPeriod.objects.filter(cooperative=self.coop_a, start_date=date(2024, 2, 1)).exists())

    def test_unexpected_error_is_recorded_as_failed(self):
        seen = []

        summary = close_periods(
            [self.period_a, self.period_b],
            today=TODAY,
            store=_BrokenReadStore(),
            on_outcome=seen.append,
        )

        self.assertEqual([o.status for o in summary.outcomes], [ClosingStatus.FAILED, ClosingStatus.FAILED])
        self.assertEqual(len(seen), 2)
        self.assertIn("connection reset", summary.outcomes[0].message)

    def test_summary_counts_by_severity(self):
        self.period_b.is_closed = True
        self.period_b.save()

        summary = close_periods([self.period_a, self.period_b], today=TODAY, dry_run=True)

        self.assertTrue(summary.dry_run)
        self.assertEqual(summary.success_count, 1)
        self.assertEqual(summary.warning_count, 1)
        self.assertFalse(summary.has_errors)
        self.assertGreaterEqual(summary.elapsed_seconds, 0)


class SelectPeriodsTests(TestCase):
    def setUp(self):
        self.coop_a = make_cooperative(code="koperasi-a", name="Koperasi A")
        self.coop_b = make_cooperative(code="koperasi-b", name="Koperasi B")
        self.feb_a = make_period(self.coop_a, name="2024-02", start=date(2024, 2, 1), end=date(2024, 2, 29))
        self.jan_a = make_period(self.coop_a)
        self.jan_b = make_period(self.coop_b)
        self.closed = make_period(self.coop_b, name="2023-12", start=date(2023, 12, 1), end=date(2023, 12, 31), is_closed=True)

    def test_open_periods_ordered_by_end_date(self):
        periods = select_periods(today=TODAY)

        self.assertEqual([p.end_date for p in periods], sorted(p.end_date for p in periods))
        self.assertNotIn(self.closed.id, [p.id for p in periods])
        self.assertEqual(len(periods), 3)

    def test_cooperative_filter(self):
        periods = select_periods(cooperative_id=self.coop_b.id, today=TODAY)

        self.assertEqual([p.id for p in periods], [self.jan_b.id])

    def test_auto_only_takes_overdue_periods(self):
        periods = select_periods(auto=True, today=TODAY)

        self.assertEqual({p.id for p in periods}, {self.jan_a.id, self.jan_b.id})

    def test_explicit_closed_period_is_returned_for_reporting(self):
        periods = select_periods(period_id=self.closed.id, today=TODAY)

        self.assertEqual([p.id for p in periods], [self.closed.id])
        outcome = close_period(periods[0], today=TODAY)
        self.assertEqual(outcome.status, ClosingStatus.ALREADY_CLOSED)
