"""Custom user model used by the `giftlist` Django app.

Users never have passwords: they sign in with passkeys only. A user starts
life either as an invite placeholder (no credentials yet, pending invite
grant) or is enrolled through that invite's first passkey registration.
"""

import secrets

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone


def generate_user_id() -> str:
    """Return a random, opaque, URL-safe user identifier."""
    return secrets.token_urlsafe(16)


class User(AbstractUser):
    """Passkey-only user with an opaque string identifier."""

    id = models.CharField(
        primary_key=True,
        max_length=32,
        default=generate_user_id,
        editable=False,
    )
    display_name = models.CharField(
        max_length=100,
        blank=True,
        help_text="Name shown to other list members and to authenticators.",
    )
    invite_token = models.CharField(
        max_length=32,
        unique=True,
        null=True,
        blank=True,
        help_text="Pending invite token, cleared once the invite is redeemed.",
    )
    invite_expires = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the pending invite token stops being accepted.",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "users"

    def save(self, *args, **kwargs):
        """Ensure users have unusable passwords and a username (passkey-only auth)"""
        if self._state.adding and not self.password:
            self.set_unusable_password()
        if not self.username:
            self.username = self.id
        super().save(*args, **kwargs)

    def has_valid_invite(self, now=None) -> bool:
        if not self.invite_token or not self.invite_expires:
            return False
        return self.invite_expires > (now or timezone.now())

    def __str__(self):
        """Return a human-readable identifier for the user."""
        return self.display_name or self.username
