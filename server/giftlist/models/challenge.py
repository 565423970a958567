from django.db import models


class Challenge(models.Model):
    """Short-lived, single-use WebAuthn challenge.

    `owner_key` is ``register:user:<id>`` or ``auth:user:<id>`` for ceremonies
    tied to a known user, or ``anonymous:<nonce>`` for sign-in before the user
    is identified.
    """

    owner_key = models.CharField(max_length=128, db_index=True)
    value = models.CharField(max_length=128)
    created_at = models.DateTimeField()
    expires_at = models.DateTimeField(db_index=True)

    class Meta:
        db_table = "webauthn_challenges"
        constraints = [
            models.UniqueConstraint(
                fields=["owner_key", "value"],
                name="unique_challenge_per_owner",
            ),
        ]

    def __str__(self):
        return f"{self.owner_key} (expires {self.expires_at:%Y-%m-%d %H:%M:%S})"
