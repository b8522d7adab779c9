# accounting/services/ledger_store.py

"""
======================================================
PATH: accounting/services/ledger_store.py
======================================================
LEDGER STORE

The persistence boundary used by the period close engine.

Every read and write is scoped by an explicit cooperative_id (or by a
FiscalPeriod, which carries one). Nothing here reads ambient tenant state.

Conventions:
- balances are normal-side: ASSET/EXPENSE = debit - credit,
  LIABILITY/EQUITY/REVENUE = credit - debit
- only APPROVED journal entries count toward balances
- a date_range is an inclusive (start, end) tuple of dates
- write failures surface as LedgerStoreError (cause chained)

LedgerStore is the contract; DjangoLedgerStore is the ORM implementation.
Services accept store=... so callers/tests can substitute their own.
"""

from __future__ import annotations

import functools
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.db.models import Q, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from accounting.models import (
    Account,
    AccountBalance,
    FiscalPeriod,
    JournalEntry,
    JournalLine,
    PeriodEndReport,
)
from accounting.services.exceptions import LedgerStoreError
from cooperatives.models import Cooperative, LoanPayment, SavingsTransaction

TWOPLACES = Decimal("0.01")
TOLERANCE = Decimal("0.01")
ZERO = Decimal("0.00")


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def normal_balance(account_type: str, debit, credit) -> Decimal:
    debit = _money(debit)
    credit = _money(credit)
    if account_type in Account.DEBIT_NORMAL_TYPES:
        return _money(debit - credit)
    return _money(credit - debit)


@dataclass(frozen=True)
class UnbalancedEntry:
    id: int
    reference_number: str
    total_debit: Decimal
    total_credit: Decimal

    @property
    def difference(self) -> Decimal:
        return _money(abs(self.total_debit - self.total_credit))


@dataclass(frozen=True)
class AccountPeriodBalance:
    account: Account
    debit_total: Decimal
    credit_total: Decimal
    balance: Decimal


def _store_write(fn):
    """Translate ORM/database failures on writes into LedgerStoreError."""

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except (ValidationError, DatabaseError) as exc:
            raise LedgerStoreError(f"{fn.__name__} failed: {exc}") from exc

    return wrapper


class LedgerStore(ABC):
    # ---------------- periods ----------------

    @abstractmethod
    def find_open_periods(
        self,
        *,
        cooperative_id=None,
        period_id=None,
        only_overdue: bool = False,
        today=None,
    ) -> list[FiscalPeriod]: ...

    @abstractmethod
    def get_period(self, period_id) -> FiscalPeriod | None: ...

    @abstractmethod
    def get_cooperative(self, cooperative_id) -> Cooperative | None: ...

    @abstractmethod
    def lock_period(self, period_id) -> FiscalPeriod: ...

    @abstractmethod
    def mark_period_closed(self, period_id, closed_by: str, closed_at=None) -> int: ...

    @abstractmethod
    def find_period_starting_on(self, cooperative_id, day) -> FiscalPeriod | None: ...

    @abstractmethod
    def insert_fiscal_period(self, **fields) -> FiscalPeriod: ...

    # ---------------- validation reads ----------------

    @abstractmethod
    def get_unbalanced_entries(self, period) -> list[UnbalancedEntry]: ...

    @abstractmethod
    def get_unapproved_entries(self, period) -> list[dict]: ...

    @abstractmethod
    def get_pending_transactions(self, period) -> list[dict]: ...

    # ---------------- balances ----------------

    @abstractmethod
    def compute_account_type_balance(
        self, cooperative_id, account_types, date_range
    ) -> Decimal: ...

    @abstractmethod
    def get_account_period_balances(
        self, cooperative_id, account_type, date_range
    ) -> list[AccountPeriodBalance]: ...

    @abstractmethod
    def compute_account_balance(self, account, as_of) -> Decimal: ...

    @abstractmethod
    def list_accounts(self, cooperative_id) -> list[Account]: ...

    # ---------------- writes ----------------

    @abstractmethod
    def find_or_create_system_account(self, cooperative_id, code: str, name: str) -> Account: ...

    @abstractmethod
    def insert_journal_entry(self, **fields) -> JournalEntry: ...

    @abstractmethod
    def insert_journal_line(self, **fields) -> JournalLine: ...

    @abstractmethod
    def upsert_account_balance(
        self, *, cooperative_id, account_id, fiscal_period_id, ending_balance, balance_date
    ) -> AccountBalance: ...

    @abstractmethod
    def upsert_period_report(
        self, *, cooperative_id, fiscal_period_id, report_type, generated_by, generated_at=None
    ) -> PeriodEndReport: ...

    def run_in_transaction(self, fn):
        with transaction.atomic():
            return fn()


class DjangoLedgerStore(LedgerStore):
    """
    ORM-backed ledger store.

    Aggregates in the database (Sum + Coalesce) to avoid N+1 over lines.
    """

    # ---------------- periods ----------------

    def find_open_periods(
        self,
        *,
        cooperative_id=None,
        period_id=None,
        only_overdue: bool = False,
        today=None,
    ) -> list[FiscalPeriod]:
        qs = FiscalPeriod.objects.select_related("cooperative").filter(is_closed=False)

        if period_id is not None:
            return list(qs.filter(pk=period_id))

        if cooperative_id is not None:
            qs = qs.filter(cooperative_id=cooperative_id)

        if only_overdue:
            qs = qs.filter(end_date__lt=today or timezone.localdate())

        return list(qs.order_by("end_date", "id"))

    def get_period(self, period_id) -> FiscalPeriod | None:
        return (
            FiscalPeriod.objects.select_related("cooperative")
            .filter(pk=period_id)
            .first()
        )

    def get_cooperative(self, cooperative_id) -> Cooperative | None:
        return Cooperative.objects.filter(pk=cooperative_id).first()

    def lock_period(self, period_id) -> FiscalPeriod:
        try:
            return FiscalPeriod.objects.select_for_update().get(pk=period_id)
        except FiscalPeriod.DoesNotExist as exc:
            raise LedgerStoreError(f"Fiscal period id={period_id} not found") from exc

    @_store_write
    def mark_period_closed(self, period_id, closed_by: str, closed_at=None) -> int:
        # Conditional update: returns 0 when someone else closed it first.
        now = timezone.now()
        return FiscalPeriod.objects.filter(pk=period_id, is_closed=False).update(
            is_closed=True,
            closed_at=closed_at or now,
            closed_by=closed_by or "",
            updated_at=now,
        )

    def find_period_starting_on(self, cooperative_id, day) -> FiscalPeriod | None:
        return FiscalPeriod.objects.filter(
            cooperative_id=cooperative_id,
            start_date=day,
        ).first()

    @_store_write
    def insert_fiscal_period(self, **fields) -> FiscalPeriod:
        return FiscalPeriod.objects.create(**fields)

    # ---------------- validation reads ----------------

    def get_unbalanced_entries(self, period) -> list[UnbalancedEntry]:
        rows = (
            JournalEntry.objects.filter(
                cooperative_id=period.cooperative_id,
                transaction_date__range=(period.start_date, period.end_date),
            )
            .annotate(
                total_debit=Coalesce(Sum("lines__debit_amount"), ZERO),
                total_credit=Coalesce(Sum("lines__credit_amount"), ZERO),
            )
            .values("id", "reference_number", "total_debit", "total_credit")
            .order_by("transaction_date", "id")
        )

        out = []
        for r in rows:
            debit = _money(r["total_debit"])
            credit = _money(r["total_credit"])
            if abs(debit - credit) > TOLERANCE:
                out.append(
                    UnbalancedEntry(
                        id=r["id"],
                        reference_number=r["reference_number"],
                        total_debit=debit,
                        total_credit=credit,
                    )
                )
        return out

    def get_unapproved_entries(self, period) -> list[dict]:
        return list(
            JournalEntry.objects.filter(
                cooperative_id=period.cooperative_id,
                transaction_date__range=(period.start_date, period.end_date),
                is_approved=False,
            )
            .order_by("transaction_date", "id")
            .values("id", "reference_number", "description")
        )

    def get_pending_transactions(self, period) -> list[dict]:
        date_range = (period.start_date, period.end_date)

        pending_savings = SavingsTransaction.objects.filter(
            cooperative_id=period.cooperative_id,
            transaction_date__range=date_range,
            status=SavingsTransaction.Status.PENDING,
        ).count()

        pending_loan_payments = LoanPayment.objects.filter(
            cooperative_id=period.cooperative_id,
            payment_date__range=date_range,
            status=LoanPayment.Status.PENDING,
        ).count()

        counts = [
            {"type": "savings", "count": pending_savings},
            {"type": "loan_payments", "count": pending_loan_payments},
        ]
        return [c for c in counts if c["count"] > 0]

    # ---------------- balances ----------------

    def _approved_lines(self, cooperative_id):
        return JournalLine.objects.filter(
            account__cooperative_id=cooperative_id,
            journal_entry__cooperative_id=cooperative_id,
            journal_entry__is_approved=True,
        )

    def compute_account_type_balance(
        self, cooperative_id, account_types, date_range
    ) -> Decimal:
        rows = (
            self._approved_lines(cooperative_id)
            .filter(
                account__account_type__in=list(account_types),
                journal_entry__transaction_date__range=date_range,
            )
            .values("account__account_type")
            .annotate(
                debit_total=Coalesce(Sum("debit_amount"), ZERO),
                credit_total=Coalesce(Sum("credit_amount"), ZERO),
            )
            .order_by()
        )

        total = ZERO
        for r in rows:
            total += normal_balance(
                r["account__account_type"], r["debit_total"], r["credit_total"]
            )
        return _money(total)

    def get_account_period_balances(
        self, cooperative_id, account_type, date_range
    ) -> list[AccountPeriodBalance]:
        line_filter = Q(
            journal_lines__journal_entry__cooperative_id=cooperative_id,
            journal_lines__journal_entry__is_approved=True,
            journal_lines__journal_entry__transaction_date__range=date_range,
        )

        accounts = (
            Account.objects.filter(cooperative_id=cooperative_id, account_type=account_type)
            .annotate(
                debit_total=Coalesce(Sum("journal_lines__debit_amount", filter=line_filter), ZERO),
                credit_total=Coalesce(Sum("journal_lines__credit_amount", filter=line_filter), ZERO),
            )
            .order_by("code")
        )

        return [
            AccountPeriodBalance(
                account=acc,
                debit_total=_money(acc.debit_total),
                credit_total=_money(acc.credit_total),
                balance=normal_balance(acc.account_type, acc.debit_total, acc.credit_total),
            )
            for acc in accounts
        ]

    def compute_account_balance(self, account, as_of) -> Decimal:
        totals = (
            self._approved_lines(account.cooperative_id)
            .filter(account_id=account.id, journal_entry__transaction_date__lte=as_of)
            .aggregate(
                debit_total=Coalesce(Sum("debit_amount"), ZERO),
                credit_total=Coalesce(Sum("credit_amount"), ZERO),
            )
        )
        debit = _money(totals["debit_total"])
        credit = _money(totals["credit_total"])
        return _money(debit - credit) if account.is_debit_normal else _money(credit - debit)

    def list_accounts(self, cooperative_id) -> list[Account]:
        return list(Account.objects.filter(cooperative_id=cooperative_id).order_by("code"))

    # ---------------- writes ----------------

    @_store_write
    def find_or_create_system_account(self, cooperative_id, code: str, name: str) -> Account:
        account = Account.objects.filter(
            cooperative_id=cooperative_id,
            code=code,
            name=name,
        ).first()
        if account:
            return account

        with transaction.atomic():
            return Account.objects.create(
                cooperative_id=cooperative_id,
                code=code,
                name=name,
                account_type=Account.EQUITY,
                parent=None,
                is_active=True,
            )

    @_store_write
    def insert_journal_entry(self, **fields) -> JournalEntry:
        return JournalEntry.objects.create(**fields)

    @_store_write
    def insert_journal_line(self, **fields) -> JournalLine:
        return JournalLine.objects.create(**fields)

    @_store_write
    def upsert_account_balance(
        self, *, cooperative_id, account_id, fiscal_period_id, ending_balance, balance_date
    ) -> AccountBalance:
        obj, _ = AccountBalance.objects.update_or_create(
            account_id=account_id,
            fiscal_period_id=fiscal_period_id,
            defaults={
                "cooperative_id": cooperative_id,
                "ending_balance": _money(ending_balance),
                "balance_date": balance_date,
            },
        )
        return obj

    @_store_write
    def upsert_period_report(
        self, *, cooperative_id, fiscal_period_id, report_type, generated_by, generated_at=None
    ) -> PeriodEndReport:
        obj, _ = PeriodEndReport.objects.update_or_create(
            fiscal_period_id=fiscal_period_id,
            report_type=report_type,
            defaults={
                "cooperative_id": cooperative_id,
                "generated_at": generated_at or timezone.now(),
                "generated_by": generated_by or "",
                "is_period_end_report": True,
            },
        )
        return obj


def get_ledger_store() -> LedgerStore:
    return DjangoLedgerStore()
