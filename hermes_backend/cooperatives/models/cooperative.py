# cooperatives/models/cooperative.py

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Cooperative(models.Model):
    """
    A cooperative (credit union). Root of tenant isolation.

    Guarantees:
    - code is a stable, unique key (do not change after go-live)
    - optional per-tenant overrides for the closing engine's system accounts;
      blank means "use settings.ACCOUNTING defaults"
    """

    name = models.CharField(max_length=150)
    code = models.SlugField(max_length=64, unique=True)

    is_active = models.BooleanField(default=True)

    income_summary_code = models.CharField(
        max_length=10,
        blank=True,
        default="",
        help_text="Overrides ACCOUNTING['INCOME_SUMMARY_CODE'] for this cooperative.",
    )
    retained_earnings_code = models.CharField(
        max_length=10,
        blank=True,
        default="",
        help_text="Overrides ACCOUNTING['RETAINED_EARNINGS_CODE'] for this cooperative.",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name = "Cooperative"
        verbose_name_plural = "Cooperatives"
        constraints = [
            models.CheckConstraint(
                condition=~Q(name=""),
                name="chk_cooperative_name_not_blank",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.code})"

    def clean(self):
        self.name = (self.name or "").strip()
        self.income_summary_code = (self.income_summary_code or "").strip()
        self.retained_earnings_code = (self.retained_earnings_code or "").strip()

        if not self.name:
            raise ValidationError("Cooperative name is required")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
