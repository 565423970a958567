from .exceptions import (
    exception_handler,
    format_error,
    log_ceremony_failure,
    CeremonyError,
    ChallengeMissingOrExpired,
    CredentialNotFound,
    CredentialFlagged,
    DuplicateCredential,
    VerificationFailed,
    PossibleCloneDetected,
    RegistrationNotPermitted,
    InviteInvalid,
)
from .relying_party import RelyingPartyConfig

__all__ = [
    "exception_handler",
    "format_error",
    "log_ceremony_failure",
    "CeremonyError",
    "ChallengeMissingOrExpired",
    "CredentialNotFound",
    "CredentialFlagged",
    "DuplicateCredential",
    "VerificationFailed",
    "PossibleCloneDetected",
    "RegistrationNotPermitted",
    "InviteInvalid",
    "RelyingPartyConfig",
]
