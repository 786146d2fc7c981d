"""
Core views for health checks and system status.
"""

from django.core.cache import caches
from django.db import DatabaseError, connection
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

SERVICE_NAME = "b2b-showcase-catalog"
CACHE_ALIASES = ("default", "catalog")


def _check_database() -> bool:
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        return True
    except DatabaseError:
        return False


def _check_cache(alias: str) -> bool:
    try:
        cache = caches[alias]
        cache.set("health_check", "ok", 10)
        return cache.get("health_check") == "ok"
    except Exception:  # pylint: disable=broad-exception-caught
        return False


@method_decorator(csrf_exempt, name="dispatch")
class HealthView(View):
    """Health check endpoint."""

    def get(self, _request):
        """Return service health status."""
        return JsonResponse({"status": "healthy", "service": SERVICE_NAME})


@method_decorator(csrf_exempt, name="dispatch")
class HealthDBView(View):
    """Database health check endpoint."""

    def get(self, _request):
        """Check database connectivity."""
        if _check_database():
            return JsonResponse({"status": "healthy", "database": "connected"})
        return JsonResponse({"status": "unhealthy", "database": "disconnected"}, status=503)


@method_decorator(csrf_exempt, name="dispatch")
class HealthCacheView(View):
    """Cache health check endpoint."""

    def get(self, _request):
        """Check connectivity of every configured cache."""
        checks = {alias: _check_cache(alias) for alias in CACHE_ALIASES}
        healthy = all(checks.values())
        return JsonResponse(
            {
                "status": "healthy" if healthy else "unhealthy",
                "caches": {alias: "connected" if ok else "disconnected" for alias, ok in checks.items()},
            },
            status=200 if healthy else 503,
        )


@method_decorator(csrf_exempt, name="dispatch")
class ReadyView(View):
    """Readiness check endpoint."""

    def get(self, _request):
        """Check if service is ready to accept traffic."""
        checks = {"database": _check_database()}
        checks.update({f"cache.{alias}": _check_cache(alias) for alias in CACHE_ALIASES})

        all_healthy = all(checks.values())
        return JsonResponse(
            {
                "status": "ready" if all_healthy else "not_ready",
                "checks": checks,
            },
            status=200 if all_healthy else 503,
        )
