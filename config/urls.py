from django.conf import settings
from django.contrib import admin
from django.db import DatabaseError, connection
from django.core.cache import cache
from django.http import JsonResponse
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView


# ---------- Health / Readiness checks -----------------------------------------

def health_check(request):
    """Liveness check; 200 while the process is running."""
    return JsonResponse({"status": "ok"})


def readiness_check(request):
    """Readiness check: database and cache connectivity."""
    checks = {"db": "ok", "cache": "ok"}
    status_code = 200

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except DatabaseError as exc:
        checks["db"] = str(exc)
        status_code = 503

    cache.set("_readiness_check", "1", timeout=5)
    if cache.get("_readiness_check") != "1":
        checks["cache"] = "read-back failed"
        status_code = 503

    overall = "ready" if status_code == 200 else "not_ready"
    return JsonResponse({"status": overall, **checks}, status=status_code)


urlpatterns = [
    path("admin/", admin.site.urls),

    # Health checks (no auth)
    path("api/v1/health/", health_check, name="health-check"),
    path("api/v1/readiness/", readiness_check, name="readiness-check"),

    path("api/v1/auth/", include("apps.authentication.urls")),
    path("api/v1/employees/", include("apps.employees.urls")),
    path("api/v1/attendance/", include("apps.attendance.urls")),
    path("api/v1/payroll/", include("apps.payroll.urls")),
    path("api/v1/billing/", include("apps.billing.urls")),
    path("api/v1/crm/", include("apps.crm.urls")),
    path("api/v1/expenses/", include("apps.expenses.urls")),
    path("api/v1/reports/", include("apps.reports.urls")),
]

if getattr(settings, "ENABLE_API_DOCS", False):
    urlpatterns += [
        path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
        path(
            "api/docs/",
            SpectacularSwaggerView.as_view(url_name="schema"),
            name="swagger-ui",
        ),
    ]
