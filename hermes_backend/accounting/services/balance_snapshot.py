# accounting/services/balance_snapshot.py

"""
BALANCE SNAPSHOT WRITER

Stores every account's normal-side balance as of period.end_date
(approved lines, no lower date bound) into AccountBalance.

Runs after closing entries so revenue/expense snapshots read zero.
Re-running overwrites the same (account, period) rows.
"""

from __future__ import annotations

import logging

from accounting.services.ledger_store import get_ledger_store

logger = logging.getLogger(__name__)


def snapshot_balances(period, *, store=None) -> int:
    store = store or get_ledger_store()

    written = 0
    for account in store.list_accounts(period.cooperative_id):
        balance = store.compute_account_balance(account, period.end_date)
        store.upsert_account_balance(
            cooperative_id=period.cooperative_id,
            account_id=account.id,
            fiscal_period_id=period.id,
            ending_balance=balance,
            balance_date=period.end_date,
        )
        written += 1

    logger.info(
        "Account balances snapshotted",
        extra={
            "period_id": period.id,
            "cooperative_id": period.cooperative_id,
            "accounts": written,
        },
    )
    return written
