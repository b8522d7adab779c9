# accounting/tests/helpers.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from accounting.models import Account, FiscalPeriod, JournalEntry, JournalLine
from cooperatives.models import Cooperative


def make_cooperative(code="koperasi-a", name="Koperasi A", **kwargs):
    return Cooperative.objects.create(code=code, name=name, **kwargs)


def make_period(
    cooperative,
    name="2024-01",
    start=date(2024, 1, 1),
    end=date(2024, 1, 31),
    **kwargs,
):
    return FiscalPeriod.objects.create(
        cooperative=cooperative,
        name=name,
        start_date=start,
        end_date=end,
        **kwargs,
    )


def make_account(cooperative, code, name, account_type):
    return Account.objects.create(
        cooperative=cooperative,
        code=code,
        name=name,
        account_type=account_type,
    )


def standard_chart(cooperative):
    return {
        "cash": make_account(cooperative, "1000", "Cash", Account.ASSET),
        "capital": make_account(cooperative, "3100", "Member Capital", Account.EQUITY),
        "revenue": make_account(cooperative, "4000", "Interest Income", Account.REVENUE),
        "fees": make_account(cooperative, "4100", "Fee Income", Account.REVENUE),
        "expense": make_account(cooperative, "5000", "Salaries", Account.EXPENSE),
    }


def post_entry(cooperative, reference, day, lines, *, approved=True, period=None, description="Test entry"):
    """lines: [(account, debit, credit), ...] with string/Decimal amounts."""
    entry = JournalEntry.objects.create(
        cooperative=cooperative,
        fiscal_period=period,
        reference_number=reference,
        transaction_date=day,
        description=description,
        is_approved=approved,
    )
    for account, debit, credit in lines:
        JournalLine.objects.create(
            journal_entry=entry,
            account=account,
            debit_amount=Decimal(str(debit)),
            credit_amount=Decimal(str(credit)),
        )
    return entry


def entry_totals(entry):
    lines = list(entry.lines.all())
    debit = sum((ln.debit_amount for ln in lines), Decimal("0.00"))
    credit = sum((ln.credit_amount for ln in lines), Decimal("0.00"))
    return debit, credit
