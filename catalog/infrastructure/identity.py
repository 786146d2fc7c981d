"""
Identity provider backed by the request identity context.
"""
from typing import Optional

from catalog.ports.identity import IdentityProvider
from core.middleware.identity import get_current_user_email


class ContextIdentityProvider(IdentityProvider):
    """Reads the email published by ``IdentityMiddleware``."""

    def current_email(self) -> Optional[str]:
        return get_current_user_email()
