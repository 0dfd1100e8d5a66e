"""Remove expired comment deletion grants."""
from django.core.management.base import BaseCommand

from blog_platform import ledger


class Command(BaseCommand):
    help = "Delete comment deletion grants whose window has passed."

    def handle(self, *args, **options):
        deleted = ledger.sweep_expired()
        self.stdout.write(self.style.SUCCESS(f"Removed {deleted} expired deletion grants."))
