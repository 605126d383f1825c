from __future__ import annotations

from datetime import date
from pathlib import Path

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from recycling.api_client import BackendClient, BackendError
from recycling.services import aggregation, exports
from recycling.services.normalize import MamaDayEntry, janitor_collections_from_payload, normalize_list


class Command(BaseCommand):
    help = "Export mama or janitor payments for a period to an xlsx or csv file."

    def add_arguments(self, parser):
        parser.add_argument("report", choices=["mamas", "janitors"], help="Which payment report to export")
        parser.add_argument("--start", type=str, default=None, help="Start date YYYY-MM-DD (default: first of this month)")
        parser.add_argument("--end", type=str, default=None, help="End date YYYY-MM-DD (default: today)")
        parser.add_argument("--format", dest="file_type", choices=["xlsx", "csv"], default="xlsx")
        parser.add_argument("--output", type=str, default=None, help="Output path (default: generated file name in cwd)")

    def _parse_date(self, value, fallback: date) -> date:
        if not value:
            return fallback
        try:
            return date.fromisoformat(value)
        except ValueError as exc:
            raise CommandError(f"Invalid date: {value} (expected YYYY-MM-DD)") from exc

    def handle(self, *args, **opts):
        today = timezone.localdate()
        start = self._parse_date(opts["start"], today.replace(day=1))
        end = self._parse_date(opts["end"], today)
        if start > end:
            raise CommandError("Start date must be before end date")

        client = BackendClient.from_settings()
        file_type = opts["file_type"]
        try:
            if opts["report"] == "mamas":
                entries = normalize_list(client.mama_payments(start, end), MamaDayEntry)
                payments = aggregation.aggregate_mama_payments(entries)
                rows = exports.mama_payment_export_rows(payments, start, end)
                prefix, sheet, count = "Mamas_Payment_Report", "Payment Summary", len(payments)
            else:
                collections = janitor_collections_from_payload(client.janitor_collections(start, end))
                suppliers = aggregation.aggregate_janitor_payments(collections)
                rows = exports.janitor_payment_export_rows(suppliers, start, end)
                prefix, sheet, count = "Janitor_Payment_Report", "Janitor Payments", len(suppliers)
        except BackendError as exc:
            raise CommandError(str(exc)) from exc

        path = Path(opts["output"] or exports.export_filename(prefix, start, end, file_type)).expanduser()
        if file_type == "csv":
            path.write_text(exports.rows_to_csv(rows), encoding="utf-8", newline="")
        else:
            path.write_bytes(exports.rows_to_xlsx([(sheet, rows)]))

        self.stdout.write(self.style.SUCCESS(f"Exported {count} {opts['report']} records to {path}"))
