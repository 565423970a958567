"""Relying-party configuration for the passkey ceremonies.

The configuration is built once at process start (see
`giftlist.apps.GiftlistConfig.ready`) and handed to every ceremony component.
Invalid values raise `ImproperlyConfigured` so a misconfigured deployment
never starts serving requests.
"""

from dataclasses import dataclass
from datetime import timedelta
from urllib.parse import urlparse

from django.core.exceptions import ImproperlyConfigured
from fido2.webauthn import UserVerificationRequirement

SUPPORTED_USER_VERIFICATION = {
    UserVerificationRequirement.PREFERRED.value,
    UserVerificationRequirement.REQUIRED.value,
}


@dataclass(frozen=True)
class RelyingPartyConfig:
    rp_id: str
    rp_name: str
    origin: str
    user_verification: str = UserVerificationRequirement.PREFERRED.value
    challenge_ttl: timedelta = timedelta(minutes=5)

    def __post_init__(self):
        if not self.rp_id or not self.origin:
            raise ImproperlyConfigured(
                "WEBAUTHN_RP_ID and WEBAUTHN_ORIGIN must be set"
            )
        if "://" in self.rp_id or "/" in self.rp_id:
            raise ImproperlyConfigured(
                "WEBAUTHN_RP_ID should be a domain name only (e.g. 'localhost' or 'example.com')"
            )

        parsed = urlparse(self.origin)
        if parsed.scheme not in {"http", "https"} or not parsed.hostname:
            raise ImproperlyConfigured(
                "WEBAUTHN_ORIGIN should be a full URL (e.g. 'http://localhost:3000')"
            )
        if parsed.path not in {"", "/"} or parsed.query or parsed.fragment:
            raise ImproperlyConfigured("WEBAUTHN_ORIGIN must not contain a path")

        host = parsed.hostname
        if host != self.rp_id and not host.endswith(f".{self.rp_id}"):
            raise ImproperlyConfigured(
                f"WEBAUTHN_ORIGIN host {host!r} is not within WEBAUTHN_RP_ID {self.rp_id!r}"
            )

        if self.user_verification not in SUPPORTED_USER_VERIFICATION:
            raise ImproperlyConfigured(
                "WEBAUTHN_USER_VERIFICATION must be 'preferred' or 'required'"
            )
        if self.challenge_ttl <= timedelta(0):
            raise ImproperlyConfigured("WEBAUTHN_CHALLENGE_TTL_SECONDS must be positive")

        # Browsers never send a trailing slash in clientDataJSON.origin
        object.__setattr__(self, "origin", self.origin.rstrip("/"))

    @classmethod
    def from_settings(cls, settings) -> "RelyingPartyConfig":
        return cls(
            rp_id=getattr(settings, "WEBAUTHN_RP_ID", ""),
            rp_name=getattr(settings, "WEBAUTHN_RP_NAME", "") or "Giftlist",
            origin=getattr(settings, "WEBAUTHN_ORIGIN", ""),
            user_verification=getattr(
                settings, "WEBAUTHN_USER_VERIFICATION", UserVerificationRequirement.PREFERRED.value
            ),
            challenge_ttl=timedelta(
                seconds=getattr(settings, "WEBAUTHN_CHALLENGE_TTL_SECONDS", 300)
            ),
        )

    @property
    def requires_user_verification(self) -> bool:
        return self.user_verification == UserVerificationRequirement.REQUIRED.value

    def verify_origin(self, origin: str) -> bool:
        """Accept only the single configured origin."""
        return origin == self.origin
