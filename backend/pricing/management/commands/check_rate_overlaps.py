from collections import defaultdict

from django.core.management.base import BaseCommand

from pricing.models import RATE_MODELS
from pricing.services.validity import periods_overlap


class Command(BaseCommand):
    help = "Reports rate versions whose validity windows overlap another version of the same key."

    def add_arguments(self, parser):
        parser.add_argument("--entity", help="Only check one entity type, e.g. seaFreight")

    def handle(self, *args, **options):
        self.stdout.write("Checking rate validity windows for overlaps...")
        entity = options.get("entity")
        problems = 0
        checked = 0

        for model in RATE_MODELS:
            if entity and model.ENTITY_TYPE != entity:
                continue

            groups = defaultdict(list)
            for rate in model.objects.order_by("valid_from", "id"):
                groups[rate.natural_key_values()].append(rate)
                checked += 1

            for key, versions in groups.items():
                for i, first in enumerate(versions):
                    for second in versions[i + 1:]:
                        if periods_overlap(first.valid_from, first.valid_to, second.valid_from, second.valid_to):
                            problems += 1
                            self.stdout.write(self.style.WARNING(
                                f"--- {model.ENTITY_TYPE} {key}: #{first.id} "
                                f"({first.valid_from} ~ {first.valid_to}) overlaps #{second.id} "
                                f"({second.valid_from} ~ {second.valid_to})"
                            ))

        self.stdout.write("-" * 20)
        if problems:
            self.stdout.write(self.style.ERROR(f"\nFound {problems} overlapping pairs across {checked} rates."))
        else:
            self.stdout.write(self.style.SUCCESS(f"\nChecked {checked} rates. No overlapping windows."))
