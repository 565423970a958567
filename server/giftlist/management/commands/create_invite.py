"""Django management command to invite a new user.

The first administrator of a fresh deployment has no passkey and therefore
cannot use the admin invite endpoint; this command bootstraps that account.
"""

from django.core.management.base import BaseCommand

from giftlist.services import relying_party
from giftlist.services.invites import invite_url, issue_invite


class Command(BaseCommand):
    """Create a placeholder user and print their invite link."""

    help = "Create an invite link for a new user"

    def add_arguments(self, parser):
        parser.add_argument("name", help="Display name of the invited user")
        parser.add_argument(
            "--staff",
            action="store_true",
            help="Give the invited user access to admin endpoints",
        )

    def handle(self, *args, **options):
        grant = issue_invite(options["name"])
        if options["staff"]:
            grant.user.is_staff = True
            grant.user.save(update_fields=["is_staff", "updated_at"])

        self.stdout.write(
            self.style.SUCCESS(
                f"Invite for {grant.user.display_name} (expires {grant.expires_at:%Y-%m-%d %H:%M} UTC)"
            )
        )
        self.stdout.write(invite_url(relying_party().origin, grant.token))
