# accounting/management/commands/close_fiscal_period.py

from __future__ import annotations

from django.core.management.base import BaseCommand
from django.utils import timezone

from accounting.services.ledger_store import get_ledger_store
from accounting.services.period_close_service import (
    ClosingStatus,
    close_periods,
    select_periods,
)


class Command(BaseCommand):
    help = (
        "Close fiscal periods: validate, post closing entries, snapshot balances "
        "and open the next period."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--cooperative",
            dest="cooperative_id",
            type=int,
            help="Only close periods of this cooperative id",
        )
        parser.add_argument(
            "--period",
            dest="period_id",
            type=int,
            help="Close this fiscal period id only",
        )
        parser.add_argument(
            "--force",
            action="store_true",
            help="Close even with validation errors or warnings (no confirmation).",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Preview what would be closed without writing anything.",
        )
        parser.add_argument(
            "--auto",
            action="store_true",
            help="Only periods whose end date has passed.",
        )
        parser.add_argument(
            "--no-input",
            "--noinput",
            action="store_false",
            dest="interactive",
            help="Never prompt; periods with warnings are skipped unless --force.",
        )

    def handle(self, *args, **options):
        cooperative_id = options.get("cooperative_id")
        period_id = options.get("period_id")
        force = bool(options.get("force"))
        dry_run = bool(options.get("dry_run"))
        auto = bool(options.get("auto"))
        interactive = options.get("interactive", True)

        store = get_ledger_store()
        today = timezone.localdate()

        self.stdout.write(self.style.MIGRATE_HEADING("Fiscal Period Closing"))
        if dry_run:
            self.stdout.write(self.style.WARNING("DRY RUN - no changes will be made"))

        if cooperative_id is not None and store.get_cooperative(cooperative_id) is None:
            self.stderr.write(self.style.ERROR(f"Cooperative ID {cooperative_id} not found"))
            return self._exit(True)

        if period_id is not None and store.get_period(period_id) is None:
            self.stderr.write(self.style.ERROR(f"Fiscal Period ID {period_id} not found"))
            return self._exit(True)

        periods = select_periods(
            cooperative_id=cooperative_id,
            period_id=period_id,
            auto=auto,
            today=today,
            store=store,
        )

        if not periods:
            self.stdout.write("No fiscal periods found that need closing")
            return self._exit(False)

        self.stdout.write(f"Found {len(periods)} period(s) to process")

        summary = close_periods(
            periods,
            force=force,
            dry_run=dry_run,
            confirm=self._confirm if interactive else None,
            today=today,
            store=store,
            on_outcome=self._report,
        )

        self._summary(summary)
        return self._exit(summary.has_errors)

    def _confirm(self, period, warnings) -> bool:
        self._warnings(warnings)
        answer = input("  Continue with warnings? [y/N] ")
        return answer.strip().lower() in ("y", "yes")

    def _warnings(self, warnings):
        self.stdout.write(self.style.WARNING("  Warnings:"))
        for w in warnings:
            self.stdout.write(self.style.WARNING(f"    - {w}"))

    def _report(self, outcome):
        self.stdout.write("")
        self.stdout.write(f"Period {outcome.period_id}: {outcome.period_name} (cooperative {outcome.cooperative_id})")

        if outcome.forced and outcome.errors:
            self.stdout.write(self.style.WARNING("  FORCED past validation errors:"))
            for e in outcome.errors:
                self.stdout.write(self.style.WARNING(f"    - {e}"))

        status = outcome.status

        if status == ClosingStatus.CLOSED:
            closing = outcome.closing
            self.stdout.write(self.style.SUCCESS("  [OK] Period closed successfully"))
            if closing is not None:
                refs = ", ".join(closing.references) or "none"
                self.stdout.write(f"    Closing entries: {refs}")
                self.stdout.write(
                    f"    Revenue {closing.total_revenue}  Expenses {closing.total_expenses}  "
                    f"Net income {closing.net_income}"
                )
            if outcome.next_period_id:
                self.stdout.write(f"    Next period created: id={outcome.next_period_id}")

        elif status == ClosingStatus.DRY_RUN:
            preview = outcome.preview
            self.stdout.write(self.style.SUCCESS("  [DRY RUN] Would close period successfully"))
            if outcome.warnings:
                self._warnings(outcome.warnings)
            if preview is not None:
                self.stdout.write(f"    Revenue accounts to close: {preview.revenue_accounts} ({preview.total_revenue})")
                self.stdout.write(f"    Expense accounts to close: {preview.expense_accounts} ({preview.total_expenses})")
                self.stdout.write(f"    Projected net income: {preview.net_income}")

        elif status == ClosingStatus.ALREADY_CLOSED:
            self.stdout.write(self.style.WARNING(f"  [SKIP] Period already closed: {outcome.message}"))

        elif status == ClosingStatus.SKIPPED:
            self._warnings(outcome.warnings)
            self.stdout.write(self.style.WARNING("  [SKIP] Skipped due to warnings"))

        elif status == ClosingStatus.BLOCKED:
            self.stderr.write(self.style.ERROR("  [FAIL] Validation errors:"))
            for e in outcome.errors:
                self.stderr.write(self.style.ERROR(f"    - {e}"))

        else:
            self.stderr.write(self.style.ERROR(f"  [FAIL] Failed to close period: {outcome.message}"))

    def _summary(self, summary):
        mode = "DRY RUN" if summary.dry_run else "ACTUAL"

        self.stdout.write("")
        self.stdout.write(self.style.MIGRATE_HEADING(f"Closing Summary ({mode})"))
        self.stdout.write(self.style.SUCCESS(f"Successfully processed: {summary.success_count}"))
        if summary.warning_count:
            self.stdout.write(self.style.WARNING(f"Processed with warnings: {summary.warning_count}"))
        if summary.error_count:
            self.stderr.write(self.style.ERROR(f"Failed to process: {summary.error_count}"))
        self.stdout.write(f"Total execution time: {summary.elapsed_seconds:.2f} seconds")

    def _exit(self, fail: bool):
        if fail:
            raise SystemExit(1)
        return None
