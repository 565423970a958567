from datetime import timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import AccessToken

from giftlist.models import User
from giftlist.services.sessions import SessionIssuer, SessionToken


class SessionIssuerTest(TestCase):
    def setUp(self):
        self.issuer = SessionIssuer()
        self.user = User.objects.create(display_name="Alice")

    def test_issue_and_resolve(self):
        raw = self.issuer.issue(self.user)

        self.assertEqual(self.issuer.resolve(raw), self.user.pk)

    def test_session_lasts_thirty_days(self):
        token = SessionToken.for_user(self.user)

        self.assertEqual(token.lifetime, timedelta(days=30))
        self.assertEqual(token["token_type"], "session")

    def test_expired_token_is_rejected(self):
        token = SessionToken.for_user(self.user)
        token.set_exp(from_time=timezone.now() - timedelta(days=31))

        self.assertIsNone(self.issuer.resolve(str(token)))

    def test_tampered_token_is_rejected(self):
        raw = self.issuer.issue(self.user)
        header_and_payload = raw.rsplit(".", 1)[0]

        self.assertIsNone(self.issuer.resolve(f"{header_and_payload}.invalidsignature"))

    def test_other_token_types_are_rejected(self):
        access = AccessToken.for_user(self.user)

        self.assertIsNone(self.issuer.resolve(str(access)))

    def test_garbage_and_empty_tokens(self):
        self.assertIsNone(self.issuer.resolve(""))
        self.assertIsNone(self.issuer.resolve("not-a-token"))

    def test_set_cookie(self):
        response = Response()

        raw = self.issuer.set_cookie(response, self.user)

        cookie = response.cookies["session"]
        self.assertEqual(cookie.value, raw)
        self.assertTrue(cookie["httponly"])
        self.assertTrue(cookie["secure"])
        self.assertEqual(cookie["samesite"], "Strict")
        self.assertEqual(cookie["path"], "/")
        self.assertEqual(cookie["max-age"], 30 * 24 * 60 * 60)

    def test_clear_cookie(self):
        response = Response()

        self.issuer.clear_cookie(response)

        cookie = response.cookies["session"]
        self.assertEqual(cookie.value, "")
        self.assertEqual(cookie["max-age"], 0)
