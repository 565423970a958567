from giftlist.views.invite import admin_invite_create
from giftlist.views.passkey import (
    passkey_add_begin,
    passkey_add_complete,
    passkey_login_begin,
    passkey_login_complete,
    passkey_reauth_begin,
    passkey_reauth_complete,
    passkey_register_begin,
    passkey_register_complete,
)
from giftlist.views.session import auth_logout, auth_me

__all__ = [
    "admin_invite_create",
    "auth_logout",
    "auth_me",
    "passkey_add_begin",
    "passkey_add_complete",
    "passkey_login_begin",
    "passkey_login_complete",
    "passkey_reauth_begin",
    "passkey_reauth_complete",
    "passkey_register_begin",
    "passkey_register_complete",
]
