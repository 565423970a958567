from django.test import TestCase
from django.utils import timezone

from giftlist.models import Credential, User
from giftlist.services.credentials import CredentialRegistry
from giftlist.utils import CredentialNotFound, DuplicateCredential


class CredentialRegistryTest(TestCase):
    def setUp(self):
        self.registry = CredentialRegistry()
        self.alice = User.objects.create(display_name="Alice")
        self.bob = User.objects.create(display_name="Bob")

    def _create(self, user, credential_id="cred-1", **kwargs):
        return self.registry.create(
            user=user,
            credential_id=credential_id,
            public_key=b"\xa5\x01\x02",
            **kwargs,
        )

    def test_create_and_find(self):
        credential = self._create(self.alice, transports=["internal"], device_name="Phone")

        found = self.registry.find_by_credential_id("cred-1")
        self.assertEqual(found.pk, credential.pk)
        self.assertEqual(found.user, self.alice)
        self.assertEqual(bytes(found.public_key), b"\xa5\x01\x02")
        self.assertEqual(found.sign_count, 0)
        self.assertEqual(found.transports, ["internal"])
        self.assertEqual(found.device_name, "Phone")
        self.assertFalse(found.flagged_for_review)

    def test_find_unknown_credential(self):
        with self.assertRaises(CredentialNotFound) as ctx:
            self.registry.find_by_credential_id("missing")

        self.assertEqual(ctx.exception.credential_id, "missing")

    def test_duplicate_credential_id_is_rejected_for_same_user(self):
        self._create(self.alice)

        with self.assertRaises(DuplicateCredential):
            self._create(self.alice)

    def test_duplicate_credential_id_is_rejected_across_users(self):
        self._create(self.alice)

        with self.assertRaises(DuplicateCredential) as ctx:
            self._create(self.bob)

        self.assertEqual(ctx.exception.credential_id, "cred-1")
        self.assertEqual(Credential.objects.filter(credential_id="cred-1").count(), 1)
        self.assertEqual(Credential.objects.get(credential_id="cred-1").user, self.alice)

    def test_find_by_user(self):
        self._create(self.alice, "cred-1")
        self._create(self.alice, "cred-2")
        self._create(self.bob, "cred-3")

        ids = [c.credential_id for c in self.registry.find_by_user(self.alice.pk)]
        self.assertEqual(ids, ["cred-1", "cred-2"])
        self.assertEqual(self.registry.find_by_user("nobody"), [])

    def test_advance_counter(self):
        self._create(self.alice, sign_count=3)
        used_at = timezone.now()

        self.assertTrue(self.registry.advance_counter("cred-1", 7, used_at))

        credential = Credential.objects.get(credential_id="cred-1")
        self.assertEqual(credential.sign_count, 7)
        self.assertEqual(credential.last_used_at, used_at)

    def test_advance_counter_refuses_to_go_backwards(self):
        self._create(self.alice, sign_count=7)

        self.assertFalse(self.registry.advance_counter("cred-1", 7))
        self.assertFalse(self.registry.advance_counter("cred-1", 2))

        credential = Credential.objects.get(credential_id="cred-1")
        self.assertEqual(credential.sign_count, 7)
        self.assertIsNone(credential.last_used_at)

    def test_advance_counter_without_counter_support(self):
        self._create(self.alice, sign_count=0)

        self.assertTrue(self.registry.advance_counter("cred-1", 0))
        self.assertIsNotNone(Credential.objects.get(credential_id="cred-1").last_used_at)

    def test_advance_counter_unknown_credential(self):
        self.assertFalse(self.registry.advance_counter("missing", 1))

    def test_advance_counter_skips_flagged_credential(self):
        self._create(self.alice, sign_count=3)
        self.registry.flag_for_review("cred-1")

        self.assertFalse(self.registry.advance_counter("cred-1", 9))
        self.assertEqual(Credential.objects.get(credential_id="cred-1").sign_count, 3)

    def test_flag_for_review(self):
        self._create(self.alice)

        self.registry.flag_for_review("cred-1")

        self.assertTrue(Credential.objects.get(credential_id="cred-1").flagged_for_review)
