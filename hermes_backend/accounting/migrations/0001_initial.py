"""
======================================================
PATH: accounting/migrations/0001_initial.py
======================================================
MIGRATION: CREATE ledger tables

- Account, FiscalPeriod, JournalEntry, JournalLine
- AccountBalance (period-end snapshots)
- PeriodEndReport (period-end statement metadata)
"""

from __future__ import annotations

from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("cooperatives", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("code", models.CharField(max_length=10)),
                ("name", models.CharField(max_length=150)),
                (
                    "account_type",
                    models.CharField(
                        choices=[
                            ("ASSET", "Asset"),
                            ("LIABILITY", "Liability"),
                            ("EQUITY", "Equity"),
                            ("REVENUE", "Revenue"),
                            ("EXPENSE", "Expense"),
                        ],
                        max_length=20,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "cooperative",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="accounts",
                        to="cooperatives.cooperative",
                    ),
                ),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="children",
                        to="accounting.account",
                    ),
                ),
            ],
            options={
                "verbose_name": "Account",
                "verbose_name_plural": "Accounts",
                "ordering": ["code"],
                "indexes": [
                    models.Index(
                        fields=["cooperative", "account_type"],
                        name="acct_coop_type_idx",
                    ),
                    models.Index(fields=["is_active"], name="acct_active_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("cooperative", "code"),
                        name="uniq_account_cooperative_code",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("code", ""), _negated=True),
                        name="chk_account_code_not_blank",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("name", ""), _negated=True),
                        name="chk_account_name_not_blank",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="FiscalPeriod",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("name", models.CharField(max_length=50)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("is_closed", models.BooleanField(default=False)),
                ("closed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "closed_by",
                    models.CharField(blank=True, default="", max_length=150),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "cooperative",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="fiscal_periods",
                        to="cooperatives.cooperative",
                    ),
                ),
            ],
            options={
                "verbose_name": "Fiscal Period",
                "verbose_name_plural": "Fiscal Periods",
                "ordering": ["cooperative", "start_date"],
                "indexes": [
                    models.Index(
                        fields=["cooperative", "is_closed"],
                        name="period_coop_closed_idx",
                    ),
                    models.Index(fields=["end_date"], name="period_end_date_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("cooperative", "start_date"),
                        name="uniq_period_cooperative_start",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("end_date__gte", models.F("start_date"))
                        ),
                        name="chk_period_end_gte_start",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalEntry",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("reference_number", models.CharField(max_length=100)),
                (
                    "transaction_date",
                    models.DateField(help_text="Accounting effective date"),
                ),
                (
                    "description",
                    models.TextField(
                        help_text="Narrative description of the journal entry"
                    ),
                ),
                ("is_approved", models.BooleanField(default=False)),
                (
                    "is_closing_entry",
                    models.BooleanField(
                        default=False,
                        help_text="System-generated period closing entry",
                    ),
                ),
                (
                    "created_by",
                    models.CharField(blank=True, default="", max_length=150),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "cooperative",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="journal_entries",
                        to="cooperatives.cooperative",
                    ),
                ),
                (
                    "fiscal_period",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="journal_entries",
                        to="accounting.fiscalperiod",
                    ),
                ),
            ],
            options={
                "verbose_name": "Journal Entry",
                "verbose_name_plural": "Journal Entries",
                "ordering": ["-transaction_date", "-created_at"],
                "indexes": [
                    models.Index(
                        fields=["cooperative", "transaction_date"],
                        name="je_coop_date_idx",
                    ),
                    models.Index(
                        fields=["cooperative", "is_approved"],
                        name="je_coop_approved_idx",
                    ),
                    models.Index(fields=["is_closing_entry"], name="je_closing_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("cooperative", "reference_number"),
                        name="uniq_journal_cooperative_reference",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalLine",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "debit_amount",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0.00"), max_digits=14
                    ),
                ),
                (
                    "credit_amount",
                    models.DecimalField(
                        decimal_places=2, default=Decimal("0.00"), max_digits=14
                    ),
                ),
                (
                    "description",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="journal_lines",
                        to="accounting.account",
                    ),
                ),
                (
                    "journal_entry",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lines",
                        to="accounting.journalentry",
                    ),
                ),
            ],
            options={
                "verbose_name": "Journal Line",
                "verbose_name_plural": "Journal Lines",
                "ordering": ["id"],
                "indexes": [
                    models.Index(fields=["account"], name="jl_account_idx"),
                    models.Index(fields=["journal_entry"], name="jl_entry_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("debit_amount__gte", 0)),
                        name="chk_journal_line_debit_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("credit_amount__gte", 0)),
                        name="chk_journal_line_credit_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="AccountBalance",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "ending_balance",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Normal-side balance (debit-normal: Dr-Cr, credit-normal: Cr-Dr)",
                        max_digits=16,
                    ),
                ),
                ("balance_date", models.DateField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="period_balances",
                        to="accounting.account",
                    ),
                ),
                (
                    "cooperative",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="account_balances",
                        to="cooperatives.cooperative",
                    ),
                ),
                (
                    "fiscal_period",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="account_balances",
                        to="accounting.fiscalperiod",
                    ),
                ),
            ],
            options={
                "ordering": ["fiscal_period", "account__code"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("account", "fiscal_period"),
                        name="uniq_account_balance_account_period",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="PeriodEndReport",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "report_type",
                    models.CharField(
                        choices=[
                            ("balance_sheet", "Balance Sheet"),
                            ("income_statement", "Income Statement"),
                            ("cash_flow", "Cash Flow"),
                            ("equity_changes", "Statement of Changes in Equity"),
                        ],
                        max_length=32,
                    ),
                ),
                (
                    "generated_at",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                (
                    "generated_by",
                    models.CharField(blank=True, default="", max_length=150),
                ),
                ("is_period_end_report", models.BooleanField(default=True)),
                (
                    "cooperative",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="period_end_reports",
                        to="cooperatives.cooperative",
                    ),
                ),
                (
                    "fiscal_period",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="period_end_reports",
                        to="accounting.fiscalperiod",
                    ),
                ),
            ],
            options={
                "ordering": ["fiscal_period", "report_type"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("fiscal_period", "report_type"),
                        name="uniq_period_report_type",
                    )
                ],
            },
        ),
    ]
