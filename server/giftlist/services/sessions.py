"""Stateless session tokens.

A session is a signed JWT (simplejwt, HS256 with the configured session
secret) carrying the user id and a 30-day expiry. Nothing is stored
server-side, so sessions end only when they expire or when the client drops
the cookie. There is no revocation list.
"""

import logging

from django.conf import settings
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings as jwt_settings
from rest_framework_simplejwt.tokens import Token

logger = logging.getLogger(__name__)


class SessionToken(Token):
    token_type = "session"
    lifetime = settings.GIFTLIST_SESSION_LIFETIME


class SessionIssuer:
    def __init__(self, cookie_name: str | None = None):
        self.cookie_name = cookie_name or settings.GIFTLIST_SESSION_COOKIE_NAME

    def issue(self, user) -> str:
        return str(SessionToken.for_user(user))

    def resolve(self, raw_token: str) -> str | None:
        """
        Return the user id a session token was issued for, or None.

        Every failure (bad signature, expired, malformed, wrong token type)
        yields None so callers cannot tell them apart.
        """
        if not raw_token:
            return None
        try:
            token = SessionToken(raw_token)
        except TokenError:
            return None
        user_id = token.get(jwt_settings.USER_ID_CLAIM)
        return str(user_id) if user_id else None

    def set_cookie(self, response, user) -> str:
        raw_token = self.issue(user)
        response.set_cookie(
            self.cookie_name,
            raw_token,
            max_age=int(SessionToken.lifetime.total_seconds()),
            httponly=True,
            secure=getattr(settings, "GIFTLIST_SESSION_COOKIE_SECURE", True),
            samesite="Strict",
            path="/",
        )
        return raw_token

    def clear_cookie(self, response) -> None:
        response.delete_cookie(self.cookie_name, path="/", samesite="Strict")
