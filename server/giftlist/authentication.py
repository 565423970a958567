"""DRF authentication backed by the session cookie."""

from django.contrib.auth import get_user_model
from rest_framework.authentication import BaseAuthentication

User = get_user_model()


class SessionCookieAuthentication(BaseAuthentication):
    """
    Resolve the signed session cookie into `request.user`.

    Invalid, expired and unknown-user sessions all fall through as
    anonymous; protected views then answer 401/403 without saying why.
    """

    def authenticate(self, request):
        # DRF loads this class while `giftlist.utils` may still be importing
        from giftlist.services.sessions import SessionIssuer

        issuer = SessionIssuer()
        user_id = issuer.resolve(request.COOKIES.get(issuer.cookie_name, ""))
        if not user_id:
            return None

        user = User.objects.filter(pk=user_id, is_active=True).first()
        if user is None:
            return None
        return (user, None)

    def authenticate_header(self, request):
        return "Session"
