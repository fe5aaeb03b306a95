from django.urls import path

from . import views

app_name = "moderation"

urlpatterns = [
    path("admin/moderate/", views.moderate, name="moderate"),
    path("admin/opportunities/", views.opportunity_queue, name="opportunities"),
    path("admin/industries/", views.industry_list, name="industries"),
    path("admin/institutes/", views.institute_list, name="institutes"),
    path("admin/users/", views.user_list, name="users"),
    path("admin/users/<int:pk>/", views.user_detail, name="user_detail"),
    path("admin/verify/industry/", views.verify_industry, name="verify_industry"),
    path("admin/verify/institute/", views.verify_institute, name="verify_institute"),
    path("admin/settings/", views.platform_settings, name="settings"),
    path("admin/analytics/", views.analytics, name="analytics"),
]
