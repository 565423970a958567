"""Request serializers for the passkey ceremony endpoints."""

from rest_framework import serializers


class RegistrationBeginSerializer(serializers.Serializer):
    invite_token = serializers.CharField(max_length=32)
    name = serializers.CharField(max_length=100, trim_whitespace=True)


class AddPasskeyBeginSerializer(serializers.Serializer):
    device_name = serializers.CharField(max_length=100, required=False, allow_blank=True)


class CeremonyCompleteSerializer(serializers.Serializer):
    credential = serializers.DictField()
    device_name = serializers.CharField(max_length=100, required=False, allow_blank=True)


class RegistrationCompleteSerializer(CeremonyCompleteSerializer):
    registration_id = serializers.CharField()


class InviteCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100, trim_whitespace=True)
