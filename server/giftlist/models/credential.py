from django.conf import settings
from django.db import models


class Credential(models.Model):
    """WebAuthn public-key credential (passkey) owned by a user"""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="credentials",
    )
    credential_id = models.CharField(
        max_length=512,
        unique=True,
        help_text="Base64url credential ID from WebAuthn (no padding)",
    )
    public_key = models.BinaryField(
        help_text="COSE-encoded credential public key"
    )
    sign_count = models.PositiveBigIntegerField(
        default=0,
        help_text="Signature counter for cloned authenticator detection",
    )
    transports = models.JSONField(
        default=list,
        blank=True,
        help_text="Transport hints reported by the authenticator",
    )
    device_name = models.CharField(
        max_length=100,
        blank=True,
        help_text="User-friendly device name",
    )
    flagged_for_review = models.BooleanField(
        default=False,
        help_text="Set when an assertion failed the signature counter check",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    last_used_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "credentials"
        indexes = [
            models.Index(fields=["user", "created_at"], name="credentials_user_id_6d3e1b_idx"),
        ]

    def __str__(self):
        return f"{self.device_name or 'Passkey'} ({self.user})"
