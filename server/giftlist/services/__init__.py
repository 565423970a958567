"""Passkey authentication services.

Ceremony components take their `RelyingPartyConfig` by injection. Views use
the factories below, which read the configuration validated at startup by
`GiftlistConfig.ready()`.
"""

from django.apps import apps

from .authentication import AuthenticationCeremony, AuthenticationResult, Scoped, Unscoped
from .challenges import ChallengeStore
from .credentials import CredentialRegistry
from .registration import RegistrationCeremony
from .sessions import SessionIssuer


def relying_party():
    return apps.get_app_config("giftlist").relying_party


def registration_ceremony() -> RegistrationCeremony:
    return RegistrationCeremony(relying_party())


def authentication_ceremony() -> AuthenticationCeremony:
    return AuthenticationCeremony(relying_party())


__all__ = [
    "AuthenticationCeremony",
    "AuthenticationResult",
    "ChallengeStore",
    "CredentialRegistry",
    "RegistrationCeremony",
    "Scoped",
    "SessionIssuer",
    "Unscoped",
    "authentication_ceremony",
    "registration_ceremony",
    "relying_party",
]
