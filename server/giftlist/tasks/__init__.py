from .cleanup import purge_expired_challenges

__all__ = [
    "purge_expired_challenges",
]
