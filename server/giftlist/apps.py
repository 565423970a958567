from django.apps import AppConfig
from django.conf import settings


class GiftlistConfig(AppConfig):
    name = "giftlist"
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self) -> None:
        from giftlist.utils.relying_party import RelyingPartyConfig

        # Raises ImproperlyConfigured on a bad RP ID / origin, before any request is served.
        self.relying_party = RelyingPartyConfig.from_settings(settings)
