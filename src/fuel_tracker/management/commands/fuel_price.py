from __future__ import annotations

from typing import Any

from django.core.management.base import BaseCommand, CommandError

from fuel_tracker.exceptions import ValidationError
from fuel_tracker.services.pricing import EMERGENCY_FALLBACK_SOURCE, get_price_resolver
from fuel_tracker.services.types import FuelKind


class Command(BaseCommand):
    help = "Resolve the current price for a fuel kind through the source fallback chain."

    def add_arguments(self, parser: Any) -> None:
        parser.add_argument(
            "fuel_kind",
            nargs="?",
            default=None,
            help=f"Fuel kind ({', '.join(kind.value for kind in FuelKind)}); all kinds when omitted",
        )
        parser.add_argument(
            "--refresh",
            action="store_true",
            help="Drop cached prices before resolving",
        )

    def handle(self, *_: Any, **options: Any) -> None:
        resolver = get_price_resolver()
        if options["refresh"]:
            resolver.clear_cache()
        kinds = [options["fuel_kind"]] if options["fuel_kind"] else list(FuelKind)

        for kind in kinds:
            try:
                quote = resolver.resolve(kind)
            except ValidationError as exc:
                raise CommandError(str(exc)) from exc

            line = (
                f"{quote.fuel_kind.display_name}: {quote.amount:.3f} EUR/L "
                f"(source={quote.source_name})"
            )
            if quote.source_name == EMERGENCY_FALLBACK_SOURCE:
                self.stdout.write(self.style.WARNING(line))
            else:
                self.stdout.write(self.style.SUCCESS(line))
