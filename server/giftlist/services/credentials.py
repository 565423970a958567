"""Credential registry backed by the `Credential` model.

`credential_id` uniqueness is enforced by the database constraint, never by
a check-then-insert. Counter updates are single conditional UPDATE
statements so concurrent assertions cannot lose or reorder counter values.
"""

import logging

from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from giftlist.models import Credential
from giftlist.utils import CredentialNotFound, DuplicateCredential

logger = logging.getLogger(__name__)


class CredentialRegistry:
    def find_by_credential_id(self, credential_id: str) -> Credential:
        try:
            return Credential.objects.select_related("user").get(credential_id=credential_id)
        except Credential.DoesNotExist:
            raise CredentialNotFound(credential_id)

    def find_by_user(self, user_id: str) -> list[Credential]:
        return list(Credential.objects.filter(user_id=user_id).order_by("created_at", "id"))

    def create(
        self,
        *,
        user,
        credential_id: str,
        public_key: bytes,
        sign_count: int = 0,
        transports=None,
        device_name: str = "",
    ) -> Credential:
        try:
            with transaction.atomic():
                return Credential.objects.create(
                    user=user,
                    credential_id=credential_id,
                    public_key=public_key,
                    sign_count=sign_count,
                    transports=list(transports or []),
                    device_name=device_name or "",
                )
        except IntegrityError:
            raise DuplicateCredential(credential_id)

    def advance_counter(self, credential_id: str, new_count: int, used_at=None) -> bool:
        """
        Store `new_count` and the last-used time for a verified assertion.

        The update only applies while the stored counter is still below
        `new_count` (or both are zero, for authenticators without counters).
        Flagged credentials never advance.
        Returns False when no row matched, i.e. a concurrent assertion already
        moved the counter to or past `new_count`.
        """
        if new_count:
            condition = Q(sign_count__lt=new_count)
        else:
            condition = Q(sign_count=0)

        updated = Credential.objects.filter(
            condition,
            credential_id=credential_id,
            flagged_for_review=False,
        ).update(
            sign_count=new_count,
            last_used_at=used_at or timezone.now(),
        )
        return updated == 1

    def flag_for_review(self, credential_id: str) -> None:
        Credential.objects.filter(credential_id=credential_id).update(flagged_for_review=True)
        logger.error(f"Credential {credential_id} flagged for review after counter regression")
