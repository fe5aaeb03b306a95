from django.urls import path

from . import views

app_name = "opportunities"

urlpatterns = [
    path("opportunities/", views.opportunities, name="list"),
    path("opportunities/<int:pk>/", views.opportunity_detail, name="detail"),
    path("opportunities/<int:pk>/apply/", views.apply, name="apply"),
    path("industries/posting-limits/", views.posting_limits, name="posting_limits"),
    path("industries/<int:pk>/opportunities/", views.industry_opportunities, name="industry_opportunities"),
    path("industries/<int:pk>/applications/", views.industry_applications, name="industry_applications"),
    path("candidates/applications/", views.candidate_applications, name="candidate_applications"),
    path("candidates/<int:pk>/saved/", views.saved_opportunities, name="saved_opportunities"),
    path("applications/<int:pk>/status/", views.application_status, name="application_status"),
    path("categories/", views.categories, name="categories"),
    path("locations/", views.locations, name="locations"),
]
