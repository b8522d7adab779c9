# accounting/services/closing_entries.py

"""
======================================================
PATH: accounting/services/closing_entries.py
======================================================
CLOSING ENTRY GENERATOR

Zeroes a period's temporary accounts in three approved journal entries,
all dated period.end_date and flagged is_closing_entry:

1) CLOSE-CR-{period_id}-{YYYYMMDD}
   Dr each revenue account (positive Cr - Dr balance, by code)
   Cr Income Summary for the total
2) CLOSE-CE-{period_id}-{YYYYMMDD}
   Cr each expense account (positive Dr - Cr balance, by code)
   Dr Income Summary for the total
3) CLOSE-CNI-{period_id}-{YYYYMMDD}   (only if |Income Summary| > 0.01)
   net income: Dr Income Summary / Cr Retained Earnings
   net loss:   Dr Retained Earnings / Cr Income Summary

YYYYMMDD is the run date. Accounts carrying an abnormal (negative)
balance are left alone and logged.

Every entry is checked to balance before anything is written.
Must run inside the caller's transaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from django.utils import timezone

from accounting.models.account import Account
from accounting.services.exceptions import UnbalancedClosingEntryError
from accounting.services.ledger_store import TOLERANCE, get_ledger_store
from accounting.services.system_accounts import (
    accounting_setting,
    get_income_summary_account,
    get_retained_earnings_account,
)

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")

REFERENCE_TYPE_CODES = {
    "revenue": "CR",
    "expense": "CE",
    "net_income": "CNI",
}


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def closing_reference(period, kind: str, run_date) -> str:
    code = REFERENCE_TYPE_CODES.get(kind, "CL")
    return f"CLOSE-{code}-{period.id}-{run_date.strftime('%Y%m%d')}"


@dataclass(frozen=True)
class ClosingLine:
    account: Account
    debit: Decimal
    credit: Decimal
    description: str


@dataclass(frozen=True)
class ClosingEntriesResult:
    entries: list = field(default_factory=list)
    total_revenue: Decimal = ZERO
    total_expenses: Decimal = ZERO
    net_income: Decimal = ZERO

    @property
    def references(self) -> list[str]:
        return [e.reference_number for e in self.entries]


@dataclass(frozen=True)
class ClosingPreview:
    revenue_accounts: int
    expense_accounts: int
    total_revenue: Decimal
    total_expenses: Decimal

    @property
    def net_income(self) -> Decimal:
        return _money(self.total_revenue - self.total_expenses)


def _qualifying_balances(period, account_type: str, *, store):
    """Accounts with a positive normal-side balance for the period."""
    balances = store.get_account_period_balances(
        period.cooperative_id,
        account_type,
        (period.start_date, period.end_date),
    )

    qualifying = []
    for row in balances:
        if row.balance > ZERO:
            qualifying.append(row)
        elif row.balance < ZERO:
            logger.warning(
                "Abnormal balance left open at period close",
                extra={
                    "period_id": period.id,
                    "cooperative_id": period.cooperative_id,
                    "account_code": row.account.code,
                    "account_type": account_type,
                    "balance": str(row.balance),
                },
            )
    return qualifying


def _check_balanced(reference: str, lines: list[ClosingLine]) -> None:
    debit = _money(sum((ln.debit for ln in lines), ZERO))
    credit = _money(sum((ln.credit for ln in lines), ZERO))
    if abs(debit - credit) > TOLERANCE:
        raise UnbalancedClosingEntryError(
            f"Closing entry {reference} does not balance: debit={debit} credit={credit}"
        )


def _write_entry(period, *, store, reference, description, lines, created_by):
    _check_balanced(reference, lines)

    entry = store.insert_journal_entry(
        cooperative_id=period.cooperative_id,
        fiscal_period_id=period.id,
        reference_number=reference,
        transaction_date=period.end_date,
        description=description,
        is_approved=True,
        is_closing_entry=True,
        created_by=created_by,
    )
    for ln in lines:
        store.insert_journal_line(
            journal_entry=entry,
            account=ln.account,
            debit_amount=ln.debit,
            credit_amount=ln.credit,
            description=ln.description,
        )
    return entry


def _close_temporary_accounts(period, kind, *, store, income_summary, run_date, created_by):
    account_type = Account.REVENUE if kind == "revenue" else Account.EXPENSE
    rows = _qualifying_balances(period, account_type, store=store)
    if not rows:
        return None, ZERO

    lines = []
    total = ZERO
    for row in rows:
        amount = _money(row.balance)
        total += amount
        if kind == "revenue":
            lines.append(ClosingLine(row.account, amount, ZERO, f"Closing {row.account.name}"))
        else:
            lines.append(ClosingLine(row.account, ZERO, amount, f"Closing {row.account.name}"))

    total = _money(total)
    if kind == "revenue":
        lines.append(ClosingLine(income_summary, ZERO, total, "Transfer to Income Summary"))
    else:
        lines.append(ClosingLine(income_summary, total, ZERO, "Transfer to Income Summary"))

    entry = _write_entry(
        period,
        store=store,
        reference=closing_reference(period, kind, run_date),
        description=f"Closing entry for {kind} accounts - Period: {period.name}",
        lines=lines,
        created_by=created_by,
    )
    return entry, total


def _income_summary_balance(period, income_summary, *, store) -> Decimal:
    rows = store.get_account_period_balances(
        period.cooperative_id,
        income_summary.account_type,
        (period.start_date, period.end_date),
    )
    for row in rows:
        if row.account.id == income_summary.id:
            # Cr - Dr: positive means net income
            return _money(row.credit_total - row.debit_total)
    return ZERO


def _transfer_net_income(period, *, store, income_summary, run_date, created_by):
    balance = _income_summary_balance(period, income_summary, store=store)
    if abs(balance) <= TOLERANCE:
        return None, balance

    retained = get_retained_earnings_account(store=store, cooperative=period.cooperative)
    amount = _money(abs(balance))

    if balance > ZERO:
        lines = [
            ClosingLine(income_summary, amount, ZERO, "Close Income Summary"),
            ClosingLine(retained, ZERO, amount, "Net income transfer"),
        ]
    else:
        lines = [
            ClosingLine(income_summary, ZERO, amount, "Close Income Summary"),
            ClosingLine(retained, amount, ZERO, "Net income transfer"),
        ]

    entry = _write_entry(
        period,
        store=store,
        reference=closing_reference(period, "net_income", run_date),
        description=f"Transfer net income to retained earnings - Period: {period.name}",
        lines=lines,
        created_by=created_by,
    )
    return entry, balance


def generate_closing_entries(period, *, store=None, run_date=None, created_by=None) -> ClosingEntriesResult:
    store = store or get_ledger_store()
    run_date = run_date or timezone.localdate()
    created_by = created_by or accounting_setting("SYSTEM_USER")

    income_summary = get_income_summary_account(store=store, cooperative=period.cooperative)

    entries = []
    kwargs = {
        "store": store,
        "income_summary": income_summary,
        "run_date": run_date,
        "created_by": created_by,
    }

    revenue_entry, total_revenue = _close_temporary_accounts(period, "revenue", **kwargs)
    if revenue_entry:
        entries.append(revenue_entry)

    expense_entry, total_expenses = _close_temporary_accounts(period, "expense", **kwargs)
    if expense_entry:
        entries.append(expense_entry)

    net_entry, net_income = _transfer_net_income(period, **kwargs)
    if net_entry:
        entries.append(net_entry)

    logger.info(
        "Closing entries generated",
        extra={
            "period_id": period.id,
            "cooperative_id": period.cooperative_id,
            "entries": len(entries),
            "total_revenue": str(total_revenue),
            "total_expenses": str(total_expenses),
            "net_income": str(net_income),
        },
    )

    return ClosingEntriesResult(
        entries=entries,
        total_revenue=_money(total_revenue),
        total_expenses=_money(total_expenses),
        net_income=_money(net_income),
    )


def preview_closing_entries(period, *, store=None) -> ClosingPreview:
    """Read-only: what generate_closing_entries would close."""
    store = store or get_ledger_store()

    revenue = _qualifying_balances(period, Account.REVENUE, store=store)
    expense = _qualifying_balances(period, Account.EXPENSE, store=store)

    return ClosingPreview(
        revenue_accounts=len(revenue),
        expense_accounts=len(expense),
        total_revenue=_money(sum((r.balance for r in revenue), ZERO)),
        total_expenses=_money(sum((r.balance for r in expense), ZERO)),
    )
