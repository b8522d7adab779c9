# accounting/tests/test_trial_balance.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from accounting.services.trial_balance_service import TrialBalanceService
from accounting.tests.helpers import make_cooperative, make_period, post_entry, standard_chart


class TrialBalanceServiceTests(TestCase):
    def setUp(self):
        self.coop = make_cooperative()
        self.period = make_period(self.coop)
        self.accounts = standard_chart(self.coop)
        self.service = TrialBalanceService()

    def test_single_balanced_entry_is_zero_sum(self):
        post_entry(
            self.coop,
            "JE-1",
            date(2024, 1, 10),
            [(self.accounts["cash"], "100.00", "0"), (self.accounts["revenue"], "0", "100.00")],
        )

        result = self.service.validate_period(self.period)

        self.assertTrue(result.balanced)
        self.assertEqual(result.difference, Decimal("0.00"))
        self.assertEqual(result.debit_normal_total, Decimal("100.00"))
        self.assertEqual(result.credit_normal_total, Decimal("100.00"))

    def test_cash_revenue_capital_example_balances(self):
        post_entry(
            self.coop,
            "JE-CAP",
            date(2024, 1, 2),
            [(self.accounts["cash"], "5000.00", "0"), (self.accounts["capital"], "0", "5000.00")],
        )
        post_entry(
            self.coop,
            "JE-REV",
            date(2024, 1, 12),
            [(self.accounts["cash"], "250.00", "0"), (self.accounts["revenue"], "0", "250.00")],
        )
        post_entry(
            self.coop,
            "JE-EXP",
            date(2024, 1, 20),
            [(self.accounts["expense"], "80.00", "0"), (self.accounts["cash"], "0", "80.00")],
        )

        result = self.service.validate_period(self.period)

        self.assertTrue(result.balanced)
        self.assertEqual(result.total_balance, Decimal("0.00"))

    def test_unbalanced_approved_entry_reports_difference(self):
        post_entry(
            self.coop,
            "JE-BAD",
            date(2024, 1, 10),
            [(self.accounts["cash"], "100.00", "0"), (self.accounts["revenue"], "0", "90.00")],
        )

        result = self.service.validate_period(self.period)

        self.assertFalse(result.balanced)
        self.assertEqual(result.difference, Decimal("10.00"))
        self.assertEqual(result.total_balance, Decimal("10.00"))

    def test_unapproved_and_out_of_range_entries_are_ignored(self):
        post_entry(
            self.coop,
            "JE-DRAFT",
            date(2024, 1, 10),
            [(self.accounts["cash"], "100.00", "0"), (self.accounts["revenue"], "0", "40.00")],
            approved=False,
        )
        post_entry(
            self.coop,
            "JE-FEB",
            date(2024, 2, 1),
            [(self.accounts["cash"], "70.00", "0")],
        )

        result = self.service.validate_period(self.period)

        self.assertTrue(result.balanced)
        self.assertEqual(result.debit_normal_total, Decimal("0.00"))

    def test_other_cooperative_does_not_leak_in(self):
        other = make_cooperative(code="koperasi-b", name="Koperasi B")
        other_accounts = standard_chart(other)
        post_entry(
            other,
            "JE-OTHER",
            date(2024, 1, 5),
            [(other_accounts["cash"], "999.00", "0")],
        )

        result = self.service.validate_period(self.period)

        self.assertTrue(result.balanced)
        self.assertEqual(result.debit_normal_total, Decimal("0.00"))

    def test_period_without_activity_is_balanced(self):
        result = self.service.validate(
            cooperative_id=self.coop.id,
            start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 31),
        )
        self.assertTrue(result.balanced)
