from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from giftlist.serializers import UserSerializer
from giftlist.services import SessionIssuer


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def auth_me(request):
    """
    Return the signed-in user's profile and registered passkeys.

    GET /api/auth/me/
    """
    serializer = UserSerializer(request.user)
    return Response(serializer.data)


@api_view(["POST"])
@permission_classes([AllowAny])
def auth_logout(request):
    """
    Log out by deleting the session cookie.

    POST /api/auth/logout/

    Sessions are stateless: a copy of the token kept elsewhere stays valid
    until it expires.
    """
    response = Response({"message": "Successfully logged out"})
    SessionIssuer().clear_cookie(response)
    return response
