"""Passkey authentication ceremony.

Two scopes are supported:

- `Scoped(user_id)`: re-authentication of a known user. The allow-list holds
  that user's credentials and the challenge is keyed to the user.
- `Unscoped(nonce)`: first-factor sign-in. Any registered credential may
  answer, and the challenge is keyed to a random nonce the client keeps in a
  cookie because no user is known yet.

Whatever the scope, the signed-in user is always the owner of the credential
named by the assertion. Request metadata never decides who signs in.
"""

import logging
import secrets
from dataclasses import dataclass

from django.utils import timezone
from fido2.utils import websafe_decode
from fido2.webauthn import AuthenticatorData, UserVerificationRequirement

from giftlist.models import Credential, User
from giftlist.services.challenges import (
    ChallengeStore,
    anonymous_owner_key,
    reauth_owner_key,
)
from giftlist.services.credentials import CredentialRegistry
from giftlist.services.fido import (
    attested_credential,
    build_fido2_server,
    ceremony_state,
    credential_descriptor,
)
from giftlist.utils import (
    CredentialFlagged,
    PossibleCloneDetected,
    RelyingPartyConfig,
    VerificationFailed,
)
from giftlist.utils.webauthn import webauthn_assertion_payload, webauthn_make_json_safe

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scoped:
    user_id: str

    @property
    def owner_key(self) -> str:
        return reauth_owner_key(self.user_id)


@dataclass(frozen=True)
class Unscoped:
    nonce: str

    @classmethod
    def new(cls) -> "Unscoped":
        return cls(nonce=secrets.token_urlsafe(24))

    @property
    def owner_key(self) -> str:
        return anonymous_owner_key(self.nonce)


AuthenticationScope = Scoped | Unscoped


@dataclass(frozen=True)
class AuthenticationResult:
    user: User
    credential: Credential
    sign_count: int


def counter_is_acceptable(stored: int, received: int) -> bool:
    """Both zero means the authenticator does not keep a counter."""
    if stored == 0 and received == 0:
        return True
    return received > stored


class AuthenticationCeremony:
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

    def begin_authentication(self, scope: AuthenticationScope) -> dict:
        """Return credential-request options (the JSON `publicKey` member)."""
        if isinstance(scope, Scoped):
            allowed = [credential_descriptor(c) for c in self.credentials.find_by_user(scope.user_id)]
        else:
            allowed = None

        challenge = self.challenges.issue(scope.owner_key)
        options, _state = self.server.authenticate_begin(
            allowed,
            user_verification=UserVerificationRequirement(self.config.user_verification),
            challenge=websafe_decode(challenge),
        )

        public_key = webauthn_make_json_safe(dict(options))["publicKey"]
        public_key.setdefault("allowCredentials", [])
        return public_key

    def complete_authentication(self, scope: AuthenticationScope, response: dict) -> AuthenticationResult:
        """Consume the scope's challenge and verify `response` against it."""
        expected_challenge = self.challenges.consume(scope.owner_key)
        return self.verify_assertion(response, expected_challenge)

    def verify_assertion(self, response: dict, expected_challenge: str) -> AuthenticationResult:
        """
        Verify an assertion against `expected_challenge`.

        Raises:
        - VerificationFailed: malformed response or any verifier check failed
        - CredentialNotFound: the assertion names an unknown credential
        - PossibleCloneDetected: the signature counter did not advance
        - CredentialFlagged: the credential is held for review after a clone warning
        """
        try:
            payload = webauthn_assertion_payload(response)
        except Exception as exc:
            raise VerificationFailed(str(exc) or exc.__class__.__name__) from exc

        credential = self.credentials.find_by_credential_id(payload["id"])

        try:
            self.server.authenticate_complete(
                ceremony_state(self.config, expected_challenge),
                [attested_credential(credential)],
                payload,
            )
            auth_data = AuthenticatorData(websafe_decode(payload["response"]["authenticatorData"]))
        except Exception as exc:
            raise VerificationFailed(str(exc) or exc.__class__.__name__) from exc

        if credential.flagged_for_review:
            # Held until an admin clears the flag, whatever counter comes back
            raise CredentialFlagged(credential.credential_id)

        received = auth_data.counter
        if not counter_is_acceptable(credential.sign_count, received):
            self.credentials.flag_for_review(credential.credential_id)
            raise PossibleCloneDetected(credential.credential_id, credential.sign_count, received)

        used_at = timezone.now()
        if not self.credentials.advance_counter(credential.credential_id, received, used_at):
            # Another assertion advanced the counter between our read and write
            self.credentials.flag_for_review(credential.credential_id)
            raise PossibleCloneDetected(credential.credential_id, credential.sign_count, received)

        credential.sign_count = received
        credential.last_used_at = used_at
        logger.info(f"Authenticated user {credential.user_id} with credential {credential.credential_id}")
        return AuthenticationResult(user=credential.user, credential=credential, sign_count=received)
