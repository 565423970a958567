import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response

from giftlist.serializers import InviteCreateSerializer
from giftlist.services import relying_party
from giftlist.services.invites import invite_url, issue_invite
from giftlist.utils import format_error

logger = logging.getLogger(__name__)


@api_view(["POST"])
@permission_classes([IsAdminUser])
def admin_invite_create(request):
    """
    Create a placeholder user and return their one-time invite link.

    POST /api/admin/invite/
    {"name": "Alice"}
    """
    serializer = InviteCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(
            format_error(code="missing_name", message="Name is required", details=serializer.errors),
            status=status.HTTP_400_BAD_REQUEST,
        )

    grant = issue_invite(serializer.validated_data["name"])
    return Response(
        {
            "url": invite_url(relying_party().origin, grant.token),
            "user_id": grant.user.pk,
            "expires_at": grant.expires_at,
        },
        status=status.HTTP_201_CREATED,
    )
