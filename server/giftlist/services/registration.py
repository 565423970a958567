"""Passkey registration ceremony.

`begin_registration` issues a challenge for the user and returns
credential-creation options excluding the user's existing credentials.
`complete_registration` consumes that challenge, verifies the attestation
response against it, the configured origin and the RP ID, and stores the new
credential. Nothing is written unless verification succeeds.

Registration is invite-gated: a user with no credentials can only register
while holding a valid invite grant. Users who already own a passkey may add
more devices without one.
"""

import logging

from django.db import transaction
from fido2.utils import websafe_decode, websafe_encode
from fido2.webauthn import (
    PublicKeyCredentialUserEntity,
    ResidentKeyRequirement,
    UserVerificationRequirement,
)

from giftlist.models import Credential, User
from giftlist.services.challenges import ChallengeStore, registration_owner_key
from giftlist.services.credentials import CredentialRegistry
from giftlist.services.fido import (
    build_fido2_server,
    ceremony_state,
    credential_descriptor,
    encode_public_key,
)
from giftlist.services.invites import InviteGrant, redeem_invite
from giftlist.utils import (
    InviteInvalid,
    RegistrationNotPermitted,
    RelyingPartyConfig,
    VerificationFailed,
)
from giftlist.utils.webauthn import (
    webauthn_attestation_payload,
    webauthn_clean_transports,
    webauthn_make_json_safe,
)

logger = logging.getLogger(__name__)


class RegistrationCeremony:
    def __init__(
        self,
        config: RelyingPartyConfig,
        challenges: ChallengeStore | None = None,
        credentials: CredentialRegistry | None = None,
    ):
        self.config = config
        self.challenges = challenges or ChallengeStore(config.challenge_ttl)
        self.credentials = credentials or CredentialRegistry()
        self.server = build_fido2_server(config)

    def _check_permitted(self, user: User, grant: InviteGrant | None) -> list[Credential]:
        existing = self.credentials.find_by_user(user.pk)
        if grant is not None:
            if grant.user.pk != user.pk or not grant.is_valid():
                raise InviteInvalid()
        elif not existing:
            raise RegistrationNotPermitted(
                f"User {user.pk} has no passkey and no invite grant"
            )
        return existing

    def begin_registration(self, user: User, display_name: str, grant: InviteGrant | None = None) -> dict:
        """Return credential-creation options (the JSON `publicKey` member)."""
        existing = self._check_permitted(user, grant)
        display_name = display_name or user.display_name or user.username

        challenge = self.challenges.issue(registration_owner_key(user.pk))
        options, _state = self.server.register_begin(
            PublicKeyCredentialUserEntity(
                id=str(user.pk).encode("utf-8"),
                name=display_name,
                display_name=display_name,
            ),
            [credential_descriptor(c) for c in existing],
            resident_key_requirement=ResidentKeyRequirement.PREFERRED,
            user_verification=UserVerificationRequirement(self.config.user_verification),
            challenge=websafe_decode(challenge),
        )

        public_key = webauthn_make_json_safe(dict(options))["publicKey"]
        public_key.setdefault("excludeCredentials", [])
        return public_key

    def complete_registration(
        self,
        user: User,
        display_name: str,
        response: dict,
        device_name: str | None = None,
        grant: InviteGrant | None = None,
    ) -> Credential:
        """
        Verify an attestation response and persist the new credential.

        Raises:
        - ChallengeMissingOrExpired: no valid challenge for this user
        - VerificationFailed: malformed response or any verifier check failed
        - DuplicateCredential: the credential id is already registered
        - InviteInvalid / RegistrationNotPermitted: registration not allowed
        """
        self._check_permitted(user, grant)
        expected_challenge = self.challenges.consume(registration_owner_key(user.pk))

        try:
            payload = webauthn_attestation_payload(response)
            auth_data = self.server.register_complete(
                ceremony_state(self.config, expected_challenge),
                payload,
            )
        except Exception as exc:
            raise VerificationFailed(str(exc) or exc.__class__.__name__) from exc

        credential_data = auth_data.credential_data
        if credential_data is None:
            raise VerificationFailed("Attestation carries no credential data")

        credential_id = websafe_encode(credential_data.credential_id)
        transports = webauthn_clean_transports((response.get("response") or {}).get("transports"))

        with transaction.atomic():
            if grant is not None:
                redeem_invite(grant)
            if display_name and display_name != user.display_name:
                user.display_name = display_name
                user.save(update_fields=["display_name", "updated_at"])
            credential = self.credentials.create(
                user=user,
                credential_id=credential_id,
                public_key=encode_public_key(credential_data.public_key),
                sign_count=auth_data.counter,
                transports=transports,
                device_name=device_name or "",
            )

        logger.info(f"Registered credential {credential_id} for user {user.pk}")
        return credential
