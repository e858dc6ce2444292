import datetime

from django.core.management.base import BaseCommand
from django.utils import timezone

from aftordle.seed_utils import ensure_daily_puzzle


class Command(BaseCommand):
    help = "Seed a sample daily puzzle for today (and optionally following days) where none exists."

    def add_arguments(self, parser):
        parser.add_argument("--days", type=int, default=1, help="Number of consecutive days to seed, starting today.")

    def handle(self, *args, **options):
        # PUBLIC_INTERFACE
        # This command is idempotent and safe to run multiple times.
        today = timezone.localdate()
        created = 0
        for offset in range(max(1, options["days"])):
            date = today + datetime.timedelta(days=offset)
            if ensure_daily_puzzle(date):
                created += 1
            else:
                self.stdout.write(self.style.WARNING(f"Puzzle already present for {date.isoformat()}."))
        self.stdout.write(self.style.SUCCESS(f"Seeded {created} daily puzzle(s)."))
