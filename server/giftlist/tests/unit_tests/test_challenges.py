from datetime import timedelta
from unittest.mock import patch

from django.test import TestCase
from django.utils import timezone

from giftlist.models import Challenge
from giftlist.services.challenges import (
    ChallengeStore,
    anonymous_owner_key,
    reauth_owner_key,
    registration_owner_key,
)
from giftlist.utils import ChallengeMissingOrExpired


class OwnerKeyTest(TestCase):
    def test_keys_do_not_collide(self):
        keys = [registration_owner_key("abc"), reauth_owner_key("abc"), anonymous_owner_key("abc")]

        self.assertEqual(keys, ["register:user:abc", "auth:user:abc", "anonymous:abc"])
        self.assertEqual(len(set(keys)), 3)

    def test_registration_and_reauth_challenges_are_independent(self):
        store = ChallengeStore()
        registration = store.issue(registration_owner_key("u1"))
        reauth = store.issue(reauth_owner_key("u1"))

        self.assertEqual(store.consume(registration_owner_key("u1")), registration)
        self.assertEqual(store.consume(reauth_owner_key("u1")), reauth)


class ChallengeStoreTest(TestCase):
    def setUp(self):
        self.store = ChallengeStore()
        self.owner = registration_owner_key("u1")

    def test_issue_persists_random_challenge(self):
        first = self.store.issue(self.owner)
        second = self.store.issue(self.owner)

        self.assertNotEqual(first, second)
        self.assertGreaterEqual(len(first), 43)
        self.assertEqual(Challenge.objects.filter(owner_key=self.owner).count(), 2)

        row = Challenge.objects.get(value=first)
        self.assertEqual(row.expires_at - row.created_at, timedelta(minutes=5))

    def test_consume_returns_value_once(self):
        value = self.store.issue(self.owner)

        self.assertEqual(self.store.consume(self.owner), value)
        with self.assertRaises(ChallengeMissingOrExpired):
            self.store.consume(self.owner)
        self.assertFalse(Challenge.objects.filter(value=value).exists())

    def test_racing_consumes_have_one_winner(self):
        value = self.store.issue(self.owner)
        row = Challenge.objects.get(value=value)

        self.assertEqual(self.store.consume(self.owner), value)

        # The loser read the same row before the winner deleted it
        with patch("django.db.models.query.QuerySet.first", return_value=row):
            with self.assertRaises(ChallengeMissingOrExpired):
                self.store.consume(self.owner)

    def test_consume_never_issued(self):
        with self.assertRaises(ChallengeMissingOrExpired) as ctx:
            self.store.consume(anonymous_owner_key("nobody"))

        self.assertEqual(ctx.exception.code, "challenge_missing_or_expired")
        self.assertEqual(ctx.exception.owner_key, "anonymous:nobody")

    def test_consume_is_scoped_to_owner(self):
        self.store.issue(self.owner)

        with self.assertRaises(ChallengeMissingOrExpired):
            self.store.consume(registration_owner_key("u2"))
        self.assertEqual(Challenge.objects.filter(owner_key=self.owner).count(), 1)

    def test_consume_prefers_newest_challenge(self):
        older = self.store.issue(self.owner)
        newer = self.store.issue(self.owner)

        self.assertEqual(self.store.consume(self.owner), newer)
        # Only the consumed row is deleted
        self.assertTrue(Challenge.objects.filter(value=older).exists())

    def test_challenge_expires_after_five_minutes(self):
        issued_at = timezone.now()
        with patch("django.utils.timezone.now", return_value=issued_at):
            self.store.issue(self.owner)

        later = issued_at + timedelta(minutes=5, seconds=1)
        with patch("django.utils.timezone.now", return_value=later):
            with self.assertRaises(ChallengeMissingOrExpired):
                self.store.consume(self.owner)

    def test_challenge_valid_just_before_expiry(self):
        issued_at = timezone.now()
        with patch("django.utils.timezone.now", return_value=issued_at):
            value = self.store.issue(self.owner)

        later = issued_at + timedelta(minutes=4, seconds=59)
        with patch("django.utils.timezone.now", return_value=later):
            self.assertEqual(self.store.consume(self.owner), value)

    def test_issue_sweeps_expired_rows_for_all_owners(self):
        issued_at = timezone.now()
        with patch("django.utils.timezone.now", return_value=issued_at):
            self.store.issue(anonymous_owner_key("stale"))

        with patch("django.utils.timezone.now", return_value=issued_at + timedelta(minutes=6)):
            self.store.issue(self.owner)

        self.assertFalse(Challenge.objects.filter(owner_key="anonymous:stale").exists())
        self.assertEqual(Challenge.objects.count(), 1)

    def test_purge_expired_returns_count(self):
        now = timezone.now()
        Challenge.objects.create(
            owner_key=self.owner,
            value="expired",
            created_at=now - timedelta(minutes=10),
            expires_at=now - timedelta(minutes=5),
        )
        self.store.issue(anonymous_owner_key("fresh"))

        self.assertEqual(self.store.purge_expired(), 0)
        Challenge.objects.create(
            owner_key=self.owner,
            value="expired-again",
            created_at=now - timedelta(minutes=10),
            expires_at=now - timedelta(minutes=5),
        )
        self.assertEqual(self.store.purge_expired(), 1)
        self.assertEqual(Challenge.objects.count(), 1)

    def test_custom_ttl(self):
        store = ChallengeStore(ttl=timedelta(seconds=30))
        value = store.issue(self.owner)

        row = Challenge.objects.get(value=value)
        self.assertEqual(row.expires_at - row.created_at, timedelta(seconds=30))
