# accounting/services/system_accounts.py

"""
SYSTEM ACCOUNTS (Income Summary / Retained Earnings)

Answers: "which account receives closing transfers for this cooperative?"

Resolution order for codes:
1) cooperative override (Cooperative.income_summary_code / retained_earnings_code)
2) settings.ACCOUNTING defaults ("3900" / "3200")

Accounts are matched on (cooperative, code, name) and created as active
EQUITY accounts when missing. Repeat calls return the same row.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.conf import settings

from accounting.services.exceptions import LedgerStoreError, SystemAccountError

logger = logging.getLogger(__name__)

DEFAULTS = {
    "INCOME_SUMMARY_CODE": "3900",
    "INCOME_SUMMARY_NAME": "Income Summary",
    "RETAINED_EARNINGS_CODE": "3200",
    "RETAINED_EARNINGS_NAME": "Retained Earnings",
    "SYSTEM_USER": "system",
}


def accounting_setting(key: str) -> str:
    conf = getattr(settings, "ACCOUNTING", None) or {}
    return str(conf.get(key) or DEFAULTS[key])


@dataclass(frozen=True)
class SystemAccountKey:
    code: str
    name: str


def income_summary_key(cooperative=None) -> SystemAccountKey:
    override = (getattr(cooperative, "income_summary_code", "") or "").strip()
    return SystemAccountKey(
        code=override or accounting_setting("INCOME_SUMMARY_CODE"),
        name=accounting_setting("INCOME_SUMMARY_NAME"),
    )


def retained_earnings_key(cooperative=None) -> SystemAccountKey:
    override = (getattr(cooperative, "retained_earnings_code", "") or "").strip()
    return SystemAccountKey(
        code=override or accounting_setting("RETAINED_EARNINGS_CODE"),
        name=accounting_setting("RETAINED_EARNINGS_NAME"),
    )


def _resolve(*, store, cooperative_id, key: SystemAccountKey):
    try:
        account = store.find_or_create_system_account(cooperative_id, key.code, key.name)
    except LedgerStoreError as exc:
        logger.error(
            "System account could not be resolved",
            extra={"cooperative_id": cooperative_id, "code": key.code, "account_name": key.name},
        )
        raise SystemAccountError(
            f"Cannot resolve system account {key.code} ({key.name}) for cooperative "
            f"{cooperative_id}. Is the code already used by another account?"
        ) from exc
    return account


def get_income_summary_account(*, store, cooperative):
    return _resolve(
        store=store,
        cooperative_id=cooperative.id,
        key=income_summary_key(cooperative),
    )


def get_retained_earnings_account(*, store, cooperative):
    return _resolve(
        store=store,
        cooperative_id=cooperative.id,
        key=retained_earnings_key(cooperative),
    )
