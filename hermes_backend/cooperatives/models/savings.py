# cooperatives/models/savings.py

"""
SAVINGS TRANSACTION MODEL

Member deposit / withdrawal against a savings product.

The accounting engine only reads this table: a period cannot be closed
quietly while savings transactions dated inside it are still "pending".
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from cooperatives.models.cooperative import Cooperative


class SavingsTransaction(models.Model):
    class TransactionType(models.TextChoices):
        DEPOSIT = "deposit", "Deposit"
        WITHDRAWAL = "withdrawal", "Withdrawal"

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        COMPLETED = "completed", "Completed"
        FAILED = "failed", "Failed"

    cooperative = models.ForeignKey(
        Cooperative,
        on_delete=models.PROTECT,
        related_name="savings_transactions",
    )

    transaction_date = models.DateField()
    transaction_type = models.CharField(
        max_length=20,
        choices=TransactionType.choices,
        default=TransactionType.DEPOSIT,
    )
    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-transaction_date", "-created_at"]
        indexes = [
            models.Index(
                fields=["cooperative", "status", "transaction_date"],
                name="savings_coop_status_date_idx",
            ),
        ]

    def __str__(self):
        return f"{self.transaction_type} {self.amount} [{self.status}]"
