"""Challenge store for passkey ceremonies.

Challenges are random, single-use and short lived. Each `issue` persists a
new row and sweeps expired rows for every owner; `consume` takes the newest
unexpired row for an owner and deletes it. The delete is conditional on the
row still existing, so two requests racing for the same challenge end with
exactly one winner.
"""

import logging
import secrets
from datetime import timedelta

from django.db import IntegrityError, transaction
from django.utils import timezone
from fido2.utils import websafe_encode

from giftlist.models import Challenge
from giftlist.utils import ChallengeMissingOrExpired

logger = logging.getLogger(__name__)

CHALLENGE_BYTES = 32
DEFAULT_CHALLENGE_TTL = timedelta(minutes=5)


def registration_owner_key(user_id: str) -> str:
    return f"register:user:{user_id}"


def reauth_owner_key(user_id: str) -> str:
    return f"auth:user:{user_id}"


def anonymous_owner_key(nonce: str) -> str:
    return f"anonymous:{nonce}"


class ChallengeStore:
    def __init__(self, ttl: timedelta = DEFAULT_CHALLENGE_TTL):
        self.ttl = ttl

    def issue(self, owner_key: str) -> str:
        """Create and persist a fresh challenge for `owner_key`."""
        now = timezone.now()
        while True:
            value = websafe_encode(secrets.token_bytes(CHALLENGE_BYTES))
            try:
                with transaction.atomic():
                    Challenge.objects.create(
                        owner_key=owner_key,
                        value=value,
                        created_at=now,
                        expires_at=now + self.ttl,
                    )
            except IntegrityError:
                # Same value already issued to this owner, draw again
                continue
            break

        self.purge_expired(now)
        return value

    def consume(self, owner_key: str) -> str:
        """
        Return and delete the newest valid challenge for `owner_key`.

        Raises ChallengeMissingOrExpired when nothing valid is left, including
        when a concurrent request consumed the same row first.
        """
        now = timezone.now()
        challenge = (
            Challenge.objects.filter(owner_key=owner_key, expires_at__gt=now)
            .order_by("-created_at", "-id")
            .first()
        )
        self.purge_expired(now)

        if challenge is None:
            raise ChallengeMissingOrExpired(owner_key)

        deleted, _ = Challenge.objects.filter(pk=challenge.pk).delete()
        if not deleted:
            raise ChallengeMissingOrExpired(owner_key)

        return challenge.value

    def purge_expired(self, now=None) -> int:
        deleted, _ = Challenge.objects.filter(expires_at__lte=now or timezone.now()).delete()
        if deleted:
            logger.debug(f"Purged {deleted} expired challenges")
        return deleted
