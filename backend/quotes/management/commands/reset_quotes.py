from django.core.management.base import BaseCommand
from django.db import transaction

from quotes.models import CalculationHistory, Quotation


class Command(BaseCommand):
    help = "Dev-only: delete every saved quotation and calculation history row."

    def add_arguments(self, parser):
        parser.add_argument("--history-only", action="store_true", help="Keep quotations, clear history only.")

    def handle(self, *args, **options):
        with transaction.atomic():
            history_count, _ = CalculationHistory.objects.all().delete()
            quote_count = 0
            if not options["history_only"]:
                quote_count, _ = Quotation.objects.all().delete()

        self.stdout.write(self.style.SUCCESS(
            f"Deleted {quote_count} quotations and {history_count} history rows."
        ))
