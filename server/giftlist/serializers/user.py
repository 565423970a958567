"""DRF serializers for user and credential models."""

from rest_framework import serializers
from giftlist.models import User, Credential


class CredentialSerializer(serializers.ModelSerializer):
    """Serializer for Credential model (never exposes key material)"""

    class Meta:
        model = Credential
        fields = [
            "id",
            "device_name",
            "transports",
            "created_at",
            "last_used_at",
        ]
        read_only_fields = fields


class UserSerializer(serializers.ModelSerializer):
    """Serializer for User model"""

    credentials = CredentialSerializer(many=True, read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "display_name",
            "credentials",
            "created_at",
        ]
        read_only_fields = fields
