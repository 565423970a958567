"""Invite grants: placeholder users waiting for their first passkey."""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from django.conf import settings
from django.utils import timezone

from giftlist.models import User
from giftlist.utils import InviteInvalid

logger = logging.getLogger(__name__)

INVITE_TOKEN_BYTES = 9  # 12 URL-safe characters


@dataclass(frozen=True)
class InviteGrant:
    user: User
    token: str
    expires_at: datetime

    def is_valid(self, now=None) -> bool:
        return self.expires_at > (now or timezone.now())


def _invite_ttl() -> timedelta:
    return timedelta(hours=getattr(settings, "GIFTLIST_INVITE_TTL_HOURS", 24))


def issue_invite(display_name: str, ttl: timedelta | None = None) -> InviteGrant:
    """Create a placeholder user holding a fresh invite token."""
    token = secrets.token_urlsafe(INVITE_TOKEN_BYTES)
    expires_at = timezone.now() + (ttl or _invite_ttl())
    user = User.objects.create(
        display_name=display_name,
        invite_token=token,
        invite_expires=expires_at,
    )
    logger.info(f"Issued invite for user {user.pk} (expires {expires_at.isoformat()})")
    return InviteGrant(user=user, token=token, expires_at=expires_at)


def find_invite(token: str) -> InviteGrant:
    if not token:
        raise InviteInvalid()
    try:
        user = User.objects.get(invite_token=token)
    except User.DoesNotExist:
        raise InviteInvalid()

    if not user.has_valid_invite():
        raise InviteInvalid()
    return InviteGrant(user=user, token=token, expires_at=user.invite_expires)


def redeem_invite(grant: InviteGrant) -> None:
    """Clear the invite token; only succeeds while it is still pending."""
    redeemed = User.objects.filter(
        pk=grant.user.pk,
        invite_token=grant.token,
        invite_expires__gt=timezone.now(),
    ).update(invite_token=None, invite_expires=None)
    if not redeemed:
        raise InviteInvalid()


def invite_url(origin: str, token: str) -> str:
    return f"{origin.rstrip('/')}/invite/{token}"
