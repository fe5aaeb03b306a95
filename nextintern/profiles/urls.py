from django.urls import path

from . import views

app_name = "profiles"

urlpatterns = [
    path("industries/<int:pk>/profile/", views.industry_profile, name="industry_profile"),
    path("industries/<int:pk>/stats/", views.industry_stats, name="industry_stats"),
    path("candidates/<int:pk>/profile/", views.candidate_profile, name="candidate_profile"),
    path("candidates/<int:pk>/skills/", views.candidate_skill_add, name="candidate_skill_add"),
    path("candidates/<int:pk>/skills/<int:skill_id>/", views.candidate_skill_delete, name="candidate_skill_delete"),
    path("institutes/<int:pk>/students/", views.institute_students, name="institute_students"),
    path("institutes/<int:pk>/analytics/", views.institute_analytics, name="institute_analytics"),
]
