"""Serializer package for the `giftlist` Django app.

This package re-exports the public DRF serializer classes used by views.
"""

from .passkey import (
    AddPasskeyBeginSerializer,
    CeremonyCompleteSerializer,
    InviteCreateSerializer,
    RegistrationBeginSerializer,
    RegistrationCompleteSerializer,
)
from .user import CredentialSerializer, UserSerializer

__all__ = [
    "AddPasskeyBeginSerializer",
    "CeremonyCompleteSerializer",
    "CredentialSerializer",
    "InviteCreateSerializer",
    "RegistrationBeginSerializer",
    "RegistrationCompleteSerializer",
    "UserSerializer",
]
