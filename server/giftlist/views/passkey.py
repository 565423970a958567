import logging

from django.conf import settings
from django_ratelimit.decorators import ratelimit
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from giftlist.serializers import (
    AddPasskeyBeginSerializer,
    CeremonyCompleteSerializer,
    CredentialSerializer,
    RegistrationBeginSerializer,
    RegistrationCompleteSerializer,
    UserSerializer,
)
from giftlist.services import (
    Scoped,
    SessionIssuer,
    Unscoped,
    authentication_ceremony,
    registration_ceremony,
    relying_party,
)
from giftlist.services.invites import find_invite
from giftlist.utils import (
    CeremonyError,
    ChallengeMissingOrExpired,
    InviteInvalid,
    RegistrationNotPermitted,
    format_error,
    log_ceremony_failure,
)
from giftlist.utils.webauthn import webauthn_pop_context, webauthn_store_context

logger = logging.getLogger(__name__)

AUTH_CHALLENGE_COOKIE = "auth-challenge"


def _invalid_request(serializer):
    return Response(
        format_error(
            code="invalid_request",
            message="Invalid request",
            details=serializer.errors,
        ),
        status=status.HTTP_400_BAD_REQUEST,
    )


def _expired(message: str):
    return Response(
        format_error(code="challenge_expired", message=message),
        status=status.HTTP_400_BAD_REQUEST,
    )


def _registration_error(exc: CeremonyError):
    log_ceremony_failure("Registration", exc)

    if isinstance(exc, ChallengeMissingOrExpired):
        return _expired("Registration session expired, please start again")
    if isinstance(exc, InviteInvalid):
        return Response(
            format_error(code="invite_invalid", message="Invalid or expired invite link"),
            status=status.HTTP_403_FORBIDDEN,
        )
    if isinstance(exc, RegistrationNotPermitted):
        return Response(
            format_error(code="registration_not_permitted", message="Registration requires an invite"),
            status=status.HTTP_403_FORBIDDEN,
        )
    return Response(
        format_error(code="registration_failed", message="Registration verification failed"),
        status=status.HTTP_400_BAD_REQUEST,
    )


def _authentication_error(exc: CeremonyError):
    log_ceremony_failure("Authentication", exc)

    if isinstance(exc, ChallengeMissingOrExpired):
        return _expired("Authentication session expired, please start again")
    # Unknown credential, bad signature and counter regression look the same to clients
    return Response(
        format_error(code="authentication_failed", message="Authentication failed"),
        status=status.HTTP_400_BAD_REQUEST,
    )


@ratelimit(group="passkey_register_begin", key="ip", rate="5/m", block=True)
@api_view(["POST"])
@permission_classes([AllowAny])
def passkey_register_begin(request):
    """
    Start passkey registration for an invited user.

    POST /api/auth/register/begin/
    {"invite_token": "...", "name": "Alice"}

    Returns credential-creation options plus a `registration_id` to send back
    with the authenticator response.
    """
    serializer = RegistrationBeginSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid_request(serializer)

    invite_token = serializer.validated_data["invite_token"]
    name = serializer.validated_data["name"]

    try:
        grant = find_invite(invite_token)
        options = registration_ceremony().begin_registration(grant.user, name, grant=grant)
    except CeremonyError as exc:
        return _registration_error(exc)

    registration_id = webauthn_store_context(
        "register",
        {"user_id": grant.user.pk, "name": name, "invite_token": invite_token},
    )
    return Response({"registration_id": registration_id, **options})


@ratelimit(group="passkey_register_complete", key="ip", rate="5/m", block=True)
@api_view(["POST"])
@permission_classes([AllowAny])
def passkey_register_complete(request):
    """
    Finish invite registration, redeem the invite and sign the user in.

    POST /api/auth/register/complete/
    {"registration_id": "...", "credential": {...}, "device_name": "Phone"}
    """
    serializer = RegistrationCompleteSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid_request(serializer)

    context = webauthn_pop_context("register", serializer.validated_data["registration_id"])
    if not context:
        return _expired("Registration session expired, please start again")

    try:
        grant = find_invite(context["invite_token"])
        if grant.user.pk != context["user_id"]:
            raise InviteInvalid()
        registration_ceremony().complete_registration(
            grant.user,
            context["name"],
            serializer.validated_data["credential"],
            device_name=serializer.validated_data.get("device_name"),
            grant=grant,
        )
    except CeremonyError as exc:
        return _registration_error(exc)

    user = grant.user
    user.refresh_from_db()
    response = Response({"verified": True, "user": UserSerializer(user).data})
    SessionIssuer().set_cookie(response, user)
    return response


@ratelimit(group="passkey_add_begin", key="ip", rate="5/m", block=True)
@api_view(["POST"])
@permission_classes([IsAuthenticated])
# Inside api_view so the key is the session user, not the anonymous Django one
@ratelimit(group="passkey_add_begin", key="user", rate="5/m", block=True)
def passkey_add_begin(request):
    """
    Start registering an additional passkey for the signed-in user.

    POST /api/auth/passkey/add/begin/
    {"device_name": "Laptop"}
    """
    serializer = AddPasskeyBeginSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid_request(serializer)

    user = request.user
    try:
        options = registration_ceremony().begin_registration(user, user.display_name)
    except CeremonyError as exc:
        return _registration_error(exc)

    registration_id = webauthn_store_context(
        "add_passkey",
        {"user_id": user.pk, "device_name": serializer.validated_data.get("device_name") or ""},
    )
    return Response({"registration_id": registration_id, **options})


@ratelimit(group="passkey_add_complete", key="ip", rate="5/m", block=True)
@api_view(["POST"])
@permission_classes([IsAuthenticated])
@ratelimit(group="passkey_add_complete", key="user", rate="5/m", block=True)
def passkey_add_complete(request):
    """
    POST /api/auth/passkey/add/complete/
    {"registration_id": "...", "credential": {...}}
    """
    serializer = RegistrationCompleteSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid_request(serializer)

    context = webauthn_pop_context("add_passkey", serializer.validated_data["registration_id"])
    if not context:
        return _expired("Registration session expired, please start again")

    if context.get("user_id") != request.user.pk:
        return Response(
            format_error(
                code="registration_mismatch",
                message="Registration does not match authenticated user",
            ),
            status=status.HTTP_400_BAD_REQUEST,
        )

    device_name = serializer.validated_data.get("device_name") or context.get("device_name")
    try:
        credential = registration_ceremony().complete_registration(
            request.user,
            request.user.display_name,
            serializer.validated_data["credential"],
            device_name=device_name,
        )
    except CeremonyError as exc:
        return _registration_error(exc)

    return Response(
        {
            "verified": True,
            "message": "Passkey added successfully",
            "credential": CredentialSerializer(credential).data,
        }
    )


@ratelimit(group="passkey_login_begin", key="ip", rate="10/m", block=True)
@api_view(["POST"])
@permission_classes([AllowAny])
def passkey_login_begin(request):
    """
    Start sign-in with any registered passkey.

    The challenge is keyed to a random nonce kept in an HttpOnly cookie,
    since the user is not known until the assertion comes back.
    """
    scope = Unscoped.new()
    options = authentication_ceremony().begin_authentication(scope)

    response = Response(options)
    response.set_cookie(
        AUTH_CHALLENGE_COOKIE,
        scope.nonce,
        max_age=int(relying_party().challenge_ttl.total_seconds()),
        httponly=True,
        secure=getattr(settings, "GIFTLIST_SESSION_COOKIE_SECURE", True),
        samesite="Strict",
        path="/",
    )
    return response


@ratelimit(group="passkey_login_complete", key="ip", rate="10/m", block=True)
@api_view(["POST"])
@permission_classes([AllowAny])
def passkey_login_complete(request):
    """
    Verify the assertion and issue the session cookie.

    POST /api/auth/login/complete/
    {"credential": {...}}

    The user is whoever owns the credential that signed the assertion.
    """
    nonce = request.COOKIES.get(AUTH_CHALLENGE_COOKIE, "").strip()
    if not nonce:
        return _expired("Authentication session expired, please start again")

    serializer = CeremonyCompleteSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid_request(serializer)

    try:
        result = authentication_ceremony().complete_authentication(
            Unscoped(nonce),
            serializer.validated_data["credential"],
        )
    except CeremonyError as exc:
        response = _authentication_error(exc)
        response.delete_cookie(AUTH_CHALLENGE_COOKIE, path="/", samesite="Strict")
        return response

    response = Response({"verified": True, "user": UserSerializer(result.user).data})
    SessionIssuer().set_cookie(response, result.user)
    response.delete_cookie(AUTH_CHALLENGE_COOKIE, path="/", samesite="Strict")
    return response


@ratelimit(group="passkey_reauth_begin", key="ip", rate="10/m", block=True)
@api_view(["POST"])
@permission_classes([IsAuthenticated])
@ratelimit(group="passkey_reauth_begin", key="user", rate="10/m", block=True)
def passkey_reauth_begin(request):
    """Start re-authentication limited to the signed-in user's passkeys."""
    options = authentication_ceremony().begin_authentication(Scoped(request.user.pk))
    return Response(options)


@ratelimit(group="passkey_reauth_complete", key="ip", rate="10/m", block=True)
@api_view(["POST"])
@permission_classes([IsAuthenticated])
@ratelimit(group="passkey_reauth_complete", key="user", rate="10/m", block=True)
def passkey_reauth_complete(request):
    """Verify a re-authentication assertion and refresh the session cookie."""
    serializer = CeremonyCompleteSerializer(data=request.data)
    if not serializer.is_valid():
        return _invalid_request(serializer)

    try:
        result = authentication_ceremony().complete_authentication(
            Scoped(request.user.pk),
            serializer.validated_data["credential"],
        )
    except CeremonyError as exc:
        return _authentication_error(exc)

    response = Response({"verified": True, "user": UserSerializer(result.user).data})
    SessionIssuer().set_cookie(response, result.user)
    return response
