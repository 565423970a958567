from django.core.cache import cache
from django.test import SimpleTestCase, TestCase
from rest_framework.test import APIClient

from giftlist.utils import (
    ChallengeMissingOrExpired,
    CredentialFlagged,
    CredentialNotFound,
    DuplicateCredential,
    InviteInvalid,
    PossibleCloneDetected,
    RegistrationNotPermitted,
    VerificationFailed,
    format_error,
    log_ceremony_failure,
)


class ErrorFormattingTest(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()

    def test_unauthenticated_error_format(self):
        response = self.client.get("/api/auth/me/")

        self.assertEqual(response.status_code, 401)
        self.assertIn("error", response.data)
        self.assertIn("code", response.data["error"])
        self.assertIn("message", response.data["error"])
        self.assertIn("details", response.data["error"])

    def test_invalid_request_format(self):
        response = self.client.post("/api/auth/register/begin/", {"name": "Alice"}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"]["code"], "INVALID_REQUEST")
        self.assertIn("invite_token", response.data["error"]["details"])

    def test_method_not_allowed_format(self):
        response = self.client.get("/api/auth/login/begin/")

        self.assertEqual(response.status_code, 405)
        self.assertEqual(response.data["error"]["code"], "METHOD_NOT_ALLOWED")


class CeremonyErrorTest(SimpleTestCase):
    def test_format_error_defaults(self):
        self.assertEqual(
            format_error("challenge_expired", "Expired"),
            {"error": {"code": "CHALLENGE_EXPIRED", "message": "Expired", "details": {}}},
        )

    def test_error_kinds_are_distinct(self):
        errors = [
            ChallengeMissingOrExpired("register:user:1"),
            CredentialNotFound("cred"),
            DuplicateCredential("cred"),
            VerificationFailed("bad signature"),
            PossibleCloneDetected("cred", 5, 5),
            CredentialFlagged("cred"),
            RegistrationNotPermitted("no invite"),
            InviteInvalid(),
        ]

        self.assertEqual(len({e.code for e in errors}), len(errors))

    def test_clone_and_duplicate_are_logged_as_errors(self):
        with self.assertLogs("giftlist.utils.exceptions", level="WARNING") as logs:
            log_ceremony_failure("Authentication", PossibleCloneDetected("cred", 5, 4))
            log_ceremony_failure("Authentication", CredentialNotFound("cred"))
            log_ceremony_failure("Authentication", CredentialFlagged("cred"))

        self.assertTrue(logs.output[0].startswith("ERROR:"))
        self.assertIn("possible_clone_detected", logs.output[0])
        self.assertTrue(logs.output[1].startswith("WARNING:"))
        self.assertTrue(logs.output[2].startswith("ERROR:"))
