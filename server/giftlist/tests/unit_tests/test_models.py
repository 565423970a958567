from datetime import timedelta

from django.db import IntegrityError
from django.test import TestCase
from django.utils import timezone

from giftlist.models import Challenge, Credential, User


class UserModelTest(TestCase):
    def test_user_gets_opaque_id_and_no_password(self):
        user = User.objects.create(display_name="Alice")

        self.assertTrue(user.pk)
        self.assertEqual(user.username, user.pk)
        self.assertFalse(user.has_usable_password())
        self.assertEqual(str(user), "Alice")

    def test_user_ids_are_unique(self):
        first = User.objects.create(display_name="Alice")
        second = User.objects.create(display_name="Alice")

        self.assertNotEqual(first.pk, second.pk)

    def test_has_valid_invite(self):
        user = User.objects.create(
            display_name="Alice",
            invite_token="token123",
            invite_expires=timezone.now() + timedelta(hours=1),
        )

        self.assertTrue(user.has_valid_invite())
        self.assertFalse(user.has_valid_invite(now=timezone.now() + timedelta(hours=2)))

    def test_user_without_invite(self):
        user = User.objects.create(display_name="Alice")

        self.assertFalse(user.has_valid_invite())

    def test_invite_tokens_are_unique(self):
        User.objects.create(display_name="Alice", invite_token="token123")

        with self.assertRaises(IntegrityError):
            User.objects.create(display_name="Bob", invite_token="token123")


class CredentialModelTest(TestCase):
    def test_credential_defaults(self):
        user = User.objects.create(display_name="Alice")
        credential = Credential.objects.create(user=user, credential_id="cred", public_key=b"key")

        self.assertEqual(credential.sign_count, 0)
        self.assertEqual(credential.transports, [])
        self.assertFalse(credential.flagged_for_review)
        self.assertIsNone(credential.last_used_at)
        self.assertEqual(list(user.credentials.all()), [credential])

    def test_credentials_are_deleted_with_user(self):
        user = User.objects.create(display_name="Alice")
        Credential.objects.create(user=user, credential_id="cred", public_key=b"key")

        user.delete()

        self.assertFalse(Credential.objects.exists())


class ChallengeModelTest(TestCase):
    def test_challenge_value_unique_per_owner(self):
        now = timezone.now()
        Challenge.objects.create(owner_key="register:user:1", value="abc", created_at=now, expires_at=now)

        with self.assertRaises(IntegrityError):
            Challenge.objects.create(owner_key="register:user:1", value="abc", created_at=now, expires_at=now)
