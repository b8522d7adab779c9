# cooperatives/models/loan_payment.py

"""
LOAN PAYMENT MODEL

A member repayment against a loan account. Read by the period close gate
(pending payments dated inside a period raise a warning).
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from cooperatives.models.cooperative import Cooperative


class LoanPayment(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        COMPLETED = "completed", "Completed"
        FAILED = "failed", "Failed"

    cooperative = models.ForeignKey(
        Cooperative,
        on_delete=models.PROTECT,
        related_name="loan_payments",
    )

    payment_date = models.DateField()
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
        ordering = ["-payment_date", "-created_at"]
        indexes = [
            models.Index(
                fields=["cooperative", "status", "payment_date"],
                name="loanpay_coop_status_date_idx",
            ),
        ]

    def __str__(self):
        return f"Loan payment {self.amount} [{self.status}]"
