import logging

from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


def exception_handler(exc, context):
    """
    Custom exception handler for DRF that returns consistent error format.
    """
    response = drf_exception_handler(exc, context)

    if response:
        response.data = format_error(
            code=getattr(exc, "default_code", "error"),
            message=str(exc),
            details=(
                response.data
                if isinstance(response.data, dict)
                else {"detail": response.data}
            ),
        )

    return response


def format_error(code: str, message: str, details=None):
    return {
        "error": {
            "code": str(code).upper(),
            "message": message,
            "details": details if details is not None else {},
        }
    }


class CeremonyError(Exception):
    """Base class for passkey ceremony failures.

    `code` is the internal error kind used in logs and tests. Clients never
    see it directly; views map every kind onto a small set of generic codes.
    """

    code = "ceremony_error"


class ChallengeMissingOrExpired(CeremonyError):
    """Raised when no unexpired, unconsumed challenge exists for an owner"""
    code = "challenge_missing_or_expired"

    def __init__(self, owner_key: str = ""):
        self.owner_key = owner_key
        super().__init__("Challenge missing or expired")


class CredentialNotFound(CeremonyError):
    """Raised when an assertion references an unknown credential id"""
    code = "credential_not_found"

    def __init__(self, credential_id: str = ""):
        self.credential_id = credential_id
        super().__init__("Credential not found")


class DuplicateCredential(CeremonyError):
    """Raised when a credential id is already registered (to any user)"""
    code = "duplicate_credential"

    def __init__(self, credential_id: str = ""):
        self.credential_id = credential_id
        super().__init__(f"Credential {credential_id} is already registered")


class VerificationFailed(CeremonyError):
    """Raised when a signature, origin, RP ID or challenge check fails"""
    code = "verification_failed"


class PossibleCloneDetected(CeremonyError):
    """Raised when an assertion's signature counter did not advance"""
    code = "possible_clone_detected"

    def __init__(self, credential_id: str, stored_count: int, received_count: int):
        self.credential_id = credential_id
        self.stored_count = stored_count
        self.received_count = received_count
        super().__init__(
            f"Signature counter for {credential_id} did not advance "
            f"(stored {stored_count}, received {received_count})"
        )


class CredentialFlagged(CeremonyError):
    """Raised when a credential held for review after a clone warning is used"""
    code = "credential_flagged"

    def __init__(self, credential_id: str = ""):
        self.credential_id = credential_id
        super().__init__(f"Credential {credential_id} is flagged for review")


class RegistrationNotPermitted(CeremonyError):
    """Raised when a user without credentials tries to register without an invite"""
    code = "registration_not_permitted"


class InviteInvalid(CeremonyError):
    """Raised when an invite token is unknown, redeemed or expired"""
    code = "invite_invalid"

    def __init__(self):
        super().__init__("Invalid or expired invite link")


def log_ceremony_failure(flow: str, exc: CeremonyError) -> None:
    """Log a rejected ceremony with its internal error kind."""
    if isinstance(exc, (DuplicateCredential, PossibleCloneDetected, CredentialFlagged)):
        logger.error(f"{flow} rejected ({exc.code}): {exc}")
    else:
        logger.warning(f"{flow} rejected ({exc.code}): {exc}")
