# accounting/tests/test_period_rollover.py

from __future__ import annotations

from datetime import date

from django.test import SimpleTestCase, TestCase

from accounting.models import FiscalPeriod
from accounting.services.period_rollover import (
    create_next_period_if_needed,
    next_period_name,
)
from accounting.tests.helpers import make_cooperative, make_period


class NextPeriodNameTests(SimpleTestCase):
    def test_month_is_incremented(self):
        self.assertEqual(next_period_name("2024-01"), "2024-02")

    def test_december_rolls_into_next_year(self):
        self.assertEqual(next_period_name("2024-12"), "2025-01")

    def test_pattern_found_inside_longer_name(self):
        self.assertEqual(next_period_name("Periode 2024-07 (Juli)"), "2024-08")

    def test_fallback_appends_next(self):
        self.assertEqual(next_period_name("FY2024 Q1"), "FY2024 Q1 - Next")


class PeriodRolloverTests(TestCase):
    def setUp(self):
        self.coop = make_cooperative()

    def test_monthly_period_projects_same_length(self):
        period = make_period(self.coop)

        created = create_next_period_if_needed(period)

        self.assertIsNotNone(created)
        self.assertEqual(created.name, "2024-02")
        self.assertEqual(created.start_date, date(2024, 2, 1))
        self.assertEqual(created.end_date, date(2024, 3, 2))
        self.assertFalse(created.is_closed)
        self.assertEqual(created.cooperative_id, self.coop.id)

    def test_quarter_with_custom_name(self):
        period = make_period(self.coop, name="FY2024 Q1", start=date(2024, 1, 1), end=date(2024, 3, 31))

        created = create_next_period_if_needed(period)

        self.assertEqual(created.name, "FY2024 Q1 - Next")
        self.assertEqual(created.start_date, date(2024, 4, 1))
        self.assertEqual(created.end_date, date(2024, 6, 30))

    def test_existing_successor_is_a_no_op(self):
        period = make_period(self.coop)
        make_period(self.coop, name="Feb", start=date(2024, 2, 1), end=date(2024, 2, 29))

        self.assertIsNone(create_next_period_if_needed(period))
        self.assertEqual(FiscalPeriod.objects.filter(cooperative=self.coop).count(), 2)

    def test_repeat_call_does_not_duplicate(self):
        period = make_period(self.coop)

        create_next_period_if_needed(period)
        create_next_period_if_needed(period)

        self.assertEqual(
            FiscalPeriod.objects.filter(cooperative=self.coop, start_date=date(2024, 2, 1)).count(),
            1,
        )

    def test_successor_of_another_cooperative_does_not_count(self):
        other = make_cooperative(code="koperasi-b", name="Koperasi B")
        make_period(other, name="2024-02", start=date(2024, 2, 1), end=date(2024, 2, 29))
        period = make_period(self.coop)

        self.assertIsNotNone(create_next_period_if_needed(period))
