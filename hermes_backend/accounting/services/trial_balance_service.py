# accounting/services/trial_balance_service.py

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from accounting.models.account import Account
from accounting.services.ledger_store import TOLERANCE, get_ledger_store

TWOPLACES = Decimal("0.01")


def _q2(amount: Decimal) -> Decimal:
    return (amount or Decimal("0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class TrialBalanceResult:
    balanced: bool
    difference: Decimal
    total_balance: Decimal
    debit_normal_total: Decimal
    credit_normal_total: Decimal


class TrialBalanceService:
    """
    Period trial balance check for one cooperative.

    Guarantees:
    - Approved journal lines only, transaction_date within [start, end]
    - Each account contributes its normal-side balance
      (ASSET/EXPENSE: Dr - Cr, LIABILITY/EQUITY/REVENUE: Cr - Dr)
    - The debit-normal family is netted against the credit-normal family:
      total_balance = debit_normal_total - credit_normal_total,
      i.e. total debits - total credits, which is 0 for balanced books
    - balanced iff |total_balance| < 0.01
    """

    def __init__(self, store=None):
        self.store = store or get_ledger_store()

    def validate(self, *, cooperative_id, start_date, end_date) -> TrialBalanceResult:
        date_range = (start_date, end_date)

        debit_normal = _q2(
            self.store.compute_account_type_balance(
                cooperative_id, Account.DEBIT_NORMAL_TYPES, date_range
            )
        )
        credit_normal = _q2(
            self.store.compute_account_type_balance(
                cooperative_id, Account.CREDIT_NORMAL_TYPES, date_range
            )
        )

        total_balance = _q2(debit_normal - credit_normal)
        difference = _q2(abs(total_balance))

        return TrialBalanceResult(
            balanced=difference < TOLERANCE,
            difference=difference,
            total_balance=total_balance,
            debit_normal_total=debit_normal,
            credit_normal_total=credit_normal,
        )

    def validate_period(self, period) -> TrialBalanceResult:
        return self.validate(
            cooperative_id=period.cooperative_id,
            start_date=period.start_date,
            end_date=period.end_date,
        )
