# mx_core/common/management/commands/generate_nric.py
import random

from django.core.management.base import BaseCommand, CommandError

from mx_core.common import nric


class Command(BaseCommand):
    help = "Print valid NRIC/FIN identifiers for seeding and manual testing."

    def add_arguments(self, parser):
        parser.add_argument("--prefix", default="S", help="One of S, T, F, G, M.")
        parser.add_argument("--count", type=int, default=1)
        parser.add_argument("--seed", type=int, default=None, help="Seed for repeatable output.")

    def handle(self, *args, **options):
        prefix = nric.normalize(options["prefix"])
        if prefix not in nric.PREFIXES:
            raise CommandError(f"--prefix must be one of {', '.join(nric.PREFIXES)}")

        count = options["count"]
        if count < 1:
            raise CommandError("--count must be at least 1")

        rng = random.Random(options["seed"])
        for _ in range(count):
            self.stdout.write(nric.random_identifier(prefix, rng=rng))
