from django.urls import path

from . import views

app_name = "accounts"

urlpatterns = [
    path("auth/register/", views.register, name="register"),
    path("auth/login/", views.login_view, name="login"),
    path("auth/logout/", views.logout_view, name="logout"),
    path("auth/session/", views.session, name="session"),
    path("auth/forgot-password/", views.forgot_password, name="forgot_password"),
    path("auth/reset-password/", views.reset_password, name="reset_password"),
    path("messages/", views.send_message, name="send_message"),
    path("messages/conversations/", views.conversations, name="conversations"),
    path("messages/initiate/", views.initiate_conversation, name="initiate_conversation"),
    path("messages/<int:user_id>/", views.thread, name="thread"),
    path("notifications/", views.notification_list, name="notifications"),
    path("notifications/read-all/", views.notification_read_all, name="notifications_read_all"),
    path("notifications/<int:pk>/read/", views.notification_read, name="notification_read"),
    path("subscriptions/create/", views.subscription_create, name="subscription_create"),
    path("subscriptions/cancel/", views.subscription_cancel, name="subscription_cancel"),
    path("users/me/settings/", views.user_settings, name="user_settings"),
    path("users/me/password/", views.change_password, name="change_password"),
]
