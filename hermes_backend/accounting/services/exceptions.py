# accounting/services/exceptions.py

"""
ACCOUNTING SERVICE ERRORS

Centralized domain errors for accounting services (period close engine).
"""


class AccountingServiceError(Exception):
    """Base exception for all accounting service failures."""


class FiscalPeriodClosedError(AccountingServiceError):
    """Raised when a period is found closed by the time we try to close it."""


class PeriodValidationError(AccountingServiceError):
    """Raised when the pre-close gate reports blocking errors."""

    def __init__(self, errors):
        self.errors = list(errors or [])
        super().__init__("; ".join(self.errors) or "Period failed validation")


class UnbalancedClosingEntryError(AccountingServiceError):
    """Raised when a generated closing entry does not balance."""


class SystemAccountError(AccountingServiceError):
    """Raised when Income Summary / Retained Earnings cannot be resolved."""


class LedgerStoreError(AccountingServiceError):
    """Raised when the ledger store cannot satisfy a read or write."""


class ClosingTransactionError(AccountingServiceError):
    """Raised when the atomic closing block fails and is rolled back."""
