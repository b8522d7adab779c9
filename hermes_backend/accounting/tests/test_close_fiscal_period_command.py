# accounting/tests/test_close_fiscal_period_command.py

from __future__ import annotations

from datetime import date
from io import StringIO
from unittest import mock

from django.core.management import call_command
from django.test import TestCase

from accounting.models import AccountBalance, FiscalPeriod, JournalEntry
from accounting.tests.helpers import make_cooperative, make_period, post_entry, standard_chart


class CloseFiscalPeriodCommandTests(TestCase):
    def setUp(self):
        self.coop = make_cooperative()
        self.period = make_period(self.coop)
        self.accounts = standard_chart(self.coop)
        post_entry(
            self.coop,
            "JE-REV",
            date(2024, 1, 10),
            [(self.accounts["cash"], "500.00", "0"), (self.accounts["revenue"], "0", "500.00")],
        )

    def _call(self, **options):
        out, err = StringIO(), StringIO()
        options.setdefault("interactive", False)
        call_command("close_fiscal_period", stdout=out, stderr=err, **options)
        return out.getvalue(), err.getvalue()

    def _unapproved_entry(self):
        post_entry(
            self.coop,
            "JE-DRAFT",
            date(2024, 1, 20),
            [(self.accounts["cash"], "5.00", "0"), (self.accounts["revenue"], "0", "5.00")],
            approved=False,
        )

    def test_closes_period_and_exits_cleanly(self):
        out, _ = self._call(period=self.period.id)

        self.assertIn("Period closed successfully", out)
        self.assertIn("Successfully processed: 1", out)
        self.period.refresh_from_db()
        self.assertTrue(self.period.is_closed)
        self.assertTrue(FiscalPeriod.objects.filter(cooperative=self.coop, name="2024-02").exists())

    def test_dry_run_reports_preview_only(self):
        out, _ = self._call(cooperative=self.coop.id, dry_run=True)

        self.assertIn("DRY RUN", out)
        self.assertIn("Revenue accounts to close: 1 (500.00)", out)
        self.period.refresh_from_db()
        self.assertFalse(self.period.is_closed)
        self.assertFalse(JournalEntry.objects.filter(is_closing_entry=True).exists())
        self.assertFalse(AccountBalance.objects.exists())

    def test_unknown_cooperative_exits_non_zero(self):
        with self.assertRaises(SystemExit) as ctx:
            self._call(cooperative=999999)
        self.assertEqual(ctx.exception.code, 1)

    def test_unknown_period_exits_non_zero(self):
        with self.assertRaises(SystemExit) as ctx:
            self._call(period=999999)
        self.assertEqual(ctx.exception.code, 1)

    def test_blocked_period_exits_non_zero(self):
        post_entry(
            self.coop,
            "JE-BAD",
            date(2024, 1, 15),
            [(self.accounts["cash"], "100.00", "0"), (self.accounts["revenue"], "0", "60.00")],
        )

        err = StringIO()
        with self.assertRaises(SystemExit) as ctx:
            call_command("close_fiscal_period", interactive=False, stdout=StringIO(), stderr=err)

        self.assertEqual(ctx.exception.code, 1)
        self.assertIn("Trial balance is not balanced", err.getvalue())
        self.period.refresh_from_db()
        self.assertFalse(self.period.is_closed)

    def test_warnings_skip_when_non_interactive(self):
        self._unapproved_entry()

        out, _ = self._call(auto=True)

        self.assertIn("Skipped due to warnings", out)
        self.assertIn("Processed with warnings: 1", out)
        self.period.refresh_from_db()
        self.assertFalse(self.period.is_closed)

    def test_interactive_confirmation(self):
        self._unapproved_entry()

        with mock.patch("builtins.input", return_value="y") as prompt:
            self._call(interactive=True)

        prompt.assert_called_once()
        self.period.refresh_from_db()
        self.assertTrue(self.period.is_closed)

    def test_force_skips_prompt(self):
        self._unapproved_entry()

        with mock.patch("builtins.input") as prompt:
            self._call(interactive=True, force=True)

        prompt.assert_not_called()
        self.period.refresh_from_db()
        self.assertTrue(self.period.is_closed)

    def test_already_closed_period_is_a_warning(self):
        self.period.is_closed = True
        self.period.save()

        out, _ = self._call(period=self.period.id)

        self.assertIn("Period already closed", out)

    def test_auto_ignores_periods_not_yet_ended(self):
        self.period.end_date = date(2999, 12, 31)
        self.period.save()

        out, _ = self._call(auto=True)

        self.assertIn("No fiscal periods found that need closing", out)
