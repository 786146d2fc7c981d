"""
Admin gate middleware.

This middleware restricts the catalog administration API to staff
sessions and keeps its responses out of every cache.
"""

import logging
from typing import Optional

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger(__name__)

ADMIN_API_PREFIX = "/api/v1/admin/"


class AdminGateMiddleware(MiddlewareMixin):
    """
    Middleware guarding the admin API.

    This middleware:
    1. Returns 401 for anonymous requests to ``/api/v1/admin/*``
    2. Returns 403 for authenticated users without staff status
    3. Marks every admin API response as non-cacheable
    """

    def _is_admin_path(self, path: str) -> bool:
        return path.startswith(ADMIN_API_PREFIX)

    def process_request(self, request: HttpRequest) -> Optional[HttpResponse]:
        """
        Reject requests that may not use the admin API.

        Args:
            request: HTTP request

        Returns:
            JSON error response, or None to continue
        """
        if not self._is_admin_path(request.path):
            return None

        user = getattr(request, "user", None)
        if user is None or not user.is_authenticated:
            return self._reject("AUTHENTICATION_REQUIRED", "Authentication required", 401)

        if not user.is_staff:
            logger.warning(
                "Non-staff user attempted admin API access",
                extra={"path": request.path, "user_email": getattr(user, "email", "")},
            )
            return self._reject("ADMIN_REQUIRED", "Admin access required", 403)

        return None

    def process_response(self, request: HttpRequest, response: HttpResponse) -> HttpResponse:
        """Disable caching of admin API responses."""
        if self._is_admin_path(request.path):
            response["Cache-Control"] = "no-store, max-age=0"
            response["Pragma"] = "no-cache"
            response["Expires"] = "0"
        return response

    @staticmethod
    def _reject(code: str, message: str, status: int) -> JsonResponse:
        return JsonResponse({"error": {"code": code, "message": message}}, status=status)
