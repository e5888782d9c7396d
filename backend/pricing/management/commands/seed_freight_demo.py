from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from core.models import Destination, Port, RailAgent, ShippingLine, TruckAgent
from pricing.models import (
    AgentSeaFreight,
    BorderDestinationFreight,
    CombinedFreight,
    DpCost,
    Dthc,
    PortBorderFreight,
    SeaFreight,
    WeightSurchargeRule,
)


class Command(BaseCommand):
    help = "Idempotently seed demo registries and one month of rates for the ICN→QIN→OSH route."

    def add_arguments(self, parser):
        parser.add_argument("--flush", action="store_true", help="Delete existing rates before seeding.")

    @transaction.atomic
    def handle(self, *args, **options):
        if options["flush"]:
            for model in (SeaFreight, AgentSeaFreight, Dthc, DpCost, CombinedFreight,
                          PortBorderFreight, BorderDestinationFreight, WeightSurchargeRule):
                model.objects.all().delete()
            self.stdout.write(self.style.WARNING("Deleted existing rates."))

        today = timezone.localdate()
        window = {"valid_from": today.replace(day=1), "valid_to": today.replace(day=1) + timedelta(days=60)}

        Port.objects.get_or_create(code="ICN", defaults={"name": "Incheon", "country": "KR", "port_type": "POL"})
        Port.objects.get_or_create(code="QIN", defaults={"name": "Qingdao", "country": "CN", "port_type": "POD"})
        osh, _ = Destination.objects.get_or_create(code="OSH", defaults={"name": "Osh", "city": "Osh"})

        for name, code in (("Asia Rail", "AR"), ("Steppe Logistics", "SL")):
            RailAgent.objects.get_or_create(name=name, defaults={"code": code})
        for name, code in (("Asia Rail", "AR"), ("COWIN", "CW")):
            TruckAgent.objects.get_or_create(name=name, defaults={"code": code})
        ShippingLine.objects.get_or_create(name="Harbor Marine", defaults={"code": "HM"})

        seeded = 0

        def seed(model, lookup, values):
            nonlocal seeded
            _, created = model.objects.get_or_create(**lookup, defaults={**values, **window})
            seeded += int(created)

        seed(SeaFreight, {"pol": "ICN", "pod": "QIN", "carrier": "Harbor Marine"},
             {"rate": Decimal("500"), "local_charge": Decimal("20")})
        seed(DpCost, {"port": "ICN"}, {"amount": Decimal("50")})
        seed(Dthc, {"agent": "Asia Rail", "pol": "ICN", "pod": "QIN", "carrier": "Harbor Marine"},
             {"amount": Decimal("30")})
        seed(PortBorderFreight, {"agent": "Asia Rail", "pol": "ICN", "pod": "QIN"}, {"rate": Decimal("100")})
        seed(PortBorderFreight, {"agent": "Steppe Logistics", "pol": "ICN", "pod": "QIN"}, {"rate": Decimal("120")})
        seed(BorderDestinationFreight, {"agent": "Asia Rail", "destination": osh}, {"rate": Decimal("200")})
        seed(BorderDestinationFreight, {"agent": "COWIN", "destination": osh}, {"rate": Decimal("180")})
        seed(CombinedFreight, {"agent": "Asia Rail", "pol": "ICN", "pod": "QIN", "destination": osh},
             {"rate": Decimal("250")})
        seed(AgentSeaFreight, {"agent": "Steppe Logistics", "pol": "ICN", "pod": "QIN", "carrier": "Harbor Marine"},
             {"rate": Decimal("450"), "local_charge": Decimal("15"), "llocal": Decimal("-10")})
        seed(WeightSurchargeRule, {"agent": "Asia Rail", "min_weight": Decimal("20000"), "max_weight": None},
             {"surcharge": Decimal("75")})

        self.stdout.write(self.style.SUCCESS(f"Seeded {seeded} rates for ICN→QIN→OSH (destination id {osh.id})."))
