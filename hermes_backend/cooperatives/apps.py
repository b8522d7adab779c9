# cooperatives/apps.py

"""
COOPERATIVES APP CONFIG

Tenant root for the ledger:
- Cooperative (every accounting row carries cooperative_id)
- Member-facing transaction records (savings, loan payments) consulted
  by the period close gate for pending work
"""

from django.apps import AppConfig


class CooperativesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "cooperatives"
    verbose_name = "Cooperatives"
