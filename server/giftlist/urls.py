from django.urls import path

from giftlist import views

app_name = "giftlist"

urlpatterns = [
    path("auth/register/begin/", views.passkey_register_begin, name="passkey_register_begin"),
    path("auth/register/complete/", views.passkey_register_complete, name="passkey_register_complete"),
    path("auth/passkey/add/begin/", views.passkey_add_begin, name="passkey_add_begin"),
    path("auth/passkey/add/complete/", views.passkey_add_complete, name="passkey_add_complete"),
    path("auth/login/begin/", views.passkey_login_begin, name="passkey_login_begin"),
    path("auth/login/complete/", views.passkey_login_complete, name="passkey_login_complete"),
    path("auth/reauth/begin/", views.passkey_reauth_begin, name="passkey_reauth_begin"),
    path("auth/reauth/complete/", views.passkey_reauth_complete, name="passkey_reauth_complete"),
    path("auth/me/", views.auth_me, name="auth_me"),
    path("auth/logout/", views.auth_logout, name="auth_logout"),
    path("admin/invite/", views.admin_invite_create, name="admin_invite_create"),
]
