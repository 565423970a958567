from django.core.management.base import BaseCommand

from giftlist.services.challenges import ChallengeStore


class Command(BaseCommand):
    help = "Delete expired WebAuthn challenges"

    def handle(self, *args, **options):
        count = ChallengeStore().purge_expired()
        self.stdout.write(self.style.SUCCESS(f"Purged {count} expired challenges"))
