from django.contrib import admin
from django.urls import include, path

admin.site.site_header = "NextIntern Administration"
admin.site.site_title = "NextIntern Admin"
admin.site.index_title = "Marketplace administration"

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("accounts.urls")),
    path("api/", include("profiles.urls")),
    path("api/", include("opportunities.urls")),
    path("api/", include("moderation.urls")),
]
