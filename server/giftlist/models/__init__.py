"""Database models exposed by the `giftlist` Django app.

This package aggregates model classes to provide a convenient import surface
for other parts of the backend.
"""

from .challenge import Challenge
from .credential import Credential
from .user import User

__all__ = [
    "Challenge",
    "Credential",
    "User",
]
