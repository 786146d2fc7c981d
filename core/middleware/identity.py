"""
Identity middleware.

This middleware publishes the authenticated user's email for the
duration of the request so that application services can stamp
``updatedBy`` without access to the request object.
"""

import contextvars
import logging
from typing import Callable, Optional

from django.http import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

# Context variable for the acting user's email
identity_context: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "identity_email", default=None
)


def get_current_user_email() -> Optional[str]:
    """
    Get the acting user's email from context.

    Returns:
        Email address or None if the request is anonymous
    """
    return identity_context.get(None)


class IdentityMiddleware:
    """
    Middleware to set the identity context from the session user.

    This middleware:
    1. Reads ``request.user`` (set by Django's AuthenticationMiddleware)
    2. Publishes its email, or None for anonymous requests
    3. Resets the context once the response is produced
    """

    def __init__(self, get_response: Callable):
        """Initialize middleware."""
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        """
        Process request and set identity context.

        Args:
            request: HTTP request

        Returns:
            HTTP response
        """
        email = None
        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated:
            email = getattr(user, "email", None) or None
            logger.debug(f"Identity context set to {email}")

        token = identity_context.set(email)
        request.identity_email = email  # type: ignore
        try:
            return self.get_response(request)
        finally:
            identity_context.reset(token)
