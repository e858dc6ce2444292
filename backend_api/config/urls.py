from django.contrib import admin
from django.urls import include, path
from drf_yasg import openapi
from drf_yasg.views import get_schema_view
from rest_framework import permissions

schema_view = get_schema_view(
    openapi.Info(
        title="Before & Aftordle API",
        default_version="v1",
        description="Daily Before & After word puzzles: clues, hints, answers and results.",
    ),
    public=True,
    permission_classes=[permissions.AllowAny],
)

urlpatterns = [
    path("django-admin/", admin.site.urls),
    path("api/", include("aftordle.urls")),
    path("docs/", schema_view.with_ui("swagger", cache_timeout=0), name="swagger-ui"),
    path("docs/openapi.json", schema_view.without_ui(cache_timeout=0), name="openapi-schema"),
]
