# cooperatives/models/__init__.py

"""
COOPERATIVES MODELS PACKAGE EXPORTS

Keep this file *imports-only* (no business logic).
"""

from cooperatives.models.cooperative import Cooperative
from cooperatives.models.loan_payment import LoanPayment
from cooperatives.models.savings import SavingsTransaction

__all__ = [
    "Cooperative",
    "SavingsTransaction",
    "LoanPayment",
]
